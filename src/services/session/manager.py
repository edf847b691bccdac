"""
Session Manager

Owns the current session identity and tells subscribers when it
changes. Credential checking belongs to whatever signs the user in;
this class only tracks the resulting identity.

Lifecycle: anonymous -> authenticated -> anonymous, driven by explicit
sign_in / sign_out calls.
"""

from typing import Awaitable, Callable, Optional

import structlog

from src.models.session import ANONYMOUS, SessionIdentity


SessionListener = Callable[[SessionIdentity], Awaitable[None]]


class SessionManager:
    """Holds the current identity and notifies listeners on change."""

    def __init__(self, identity: SessionIdentity = ANONYMOUS):
        self._identity = identity
        self._listeners: list[SessionListener] = []
        self._logger = structlog.get_logger(__name__)

    @property
    def identity(self) -> SessionIdentity:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._identity.is_authenticated

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register an async listener.

        Returns a callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_in(self, user_id: str, email: Optional[str] = None) -> SessionIdentity:
        """
        Switch to an authenticated identity and notify listeners.

        Raises:
            ValueError: user_id is blank or the anonymous identity's id
        """
        if user_id.strip() == ANONYMOUS.user_id:
            raise ValueError(f"'{ANONYMOUS.user_id}' is reserved and can't be used to sign in")
        identity = SessionIdentity(user_id=user_id, email=email)
        await self._change(identity)
        return identity

    async def sign_out(self) -> None:
        """Switch back to the anonymous identity and notify listeners."""
        await self._change(ANONYMOUS)

    async def _change(self, identity: SessionIdentity) -> None:
        if identity == self._identity:
            return
        self._logger.info(
            "session_changed",
            user_id=identity.user_id,
            authenticated=identity.is_authenticated,
        )
        self._identity = identity
        # Listener errors propagate to whoever triggered the change
        for listener in list(self._listeners):
            await listener(identity)
