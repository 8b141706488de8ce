"""Session state and lifecycle."""

from gogomedia.session.context import SessionContext
from gogomedia.session.manager import SessionManager

__all__ = ["SessionContext", "SessionManager"]
