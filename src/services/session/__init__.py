"""Session identity collaborator."""

from src.services.session.manager import SessionListener, SessionManager

__all__ = ["SessionListener", "SessionManager"]
