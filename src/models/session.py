"""
Session identity.

The identity of the signed-in principal is an explicit value that is
passed into every ledger and storage call. Nothing looks it up from
ambient state.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionIdentity(BaseModel):
    """The principal that scopes which records are visible and writable."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    user_id: str = Field(
        ...,
        min_length=1,
        description="Stable identifier of the principal"
    )
    email: Optional[str] = Field(
        default=None,
        description="Email shown in the header, if known"
    )
    is_authenticated: bool = Field(
        default=True,
        description="False only for the anonymous identity"
    )

    @property
    def display_name(self) -> str:
        return self.email or self.user_id


ANONYMOUS = SessionIdentity(user_id="anonymous", is_authenticated=False)
