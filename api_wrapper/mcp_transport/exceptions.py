"""SSE transport exceptions."""

from api_wrapper.exceptions import APIWrapperError


class TransportError(APIWrapperError):
    """Base exception for session transport errors."""
    pass


class SessionNotFoundError(TransportError):
    """Raised when a session id does not match a live session.

    Attributes:
        session_id: The unknown or closed session id.
    """

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session not found: {session_id}",
            code="SESSION_NOT_FOUND"
        )
        self.session_id = session_id


class SessionClosedError(TransportError):
    """Raised to the stream consumer once its session has been closed."""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session closed: {session_id}",
            code="SESSION_CLOSED"
        )
        self.session_id = session_id
