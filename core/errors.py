"""Error taxonomy for the game-session integrity layer"""
from typing import Optional


class IntegrityError(Exception):
    """Base class for integrity layer failures"""
    pass


class TransportError(IntegrityError):
    """
    Raised after every attempt of a request failed with a retryable error.

    Carries the attempt count and the last underlying error message so the
    classifier and logs can report them.
    """

    def __init__(self, attempts: int, last_error: Optional[str] = None):
        self.attempts = attempts
        self.last_error = last_error or "Unknown error"
        super().__init__(f"Connection failed after {attempts} attempts. {self.last_error}")


class ValidationError(IntegrityError):
    """A proposed state change exceeded an anti-cheat bound"""

    def __init__(self, message: str, action_kind: Optional[str] = None, field: Optional[str] = None):
        self.action_kind = action_kind
        self.field = field
        super().__init__(message)


class BackendError(IntegrityError):
    """The backend rejected an authenticated request (permission, conflict, not found, ...)"""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[str] = None,
        hint: Optional[str] = None
    ):
        self.message = message
        self.status = status
        self.code = code
        self.details = details
        self.hint = hint
        super().__init__(message)

    def __repr__(self) -> str:
        return f"BackendError(status={self.status!r}, code={self.code!r}, message={self.message!r})"
