"""Error types for FitLog.

Every error carries a short message that is safe to show to the user.
"""

from typing import Optional


class FitLogError(Exception):
    """Base exception for all FitLog errors."""

    pass


class ValidationError(FitLogError):
    """Raised when user input is malformed. Never reaches a remote call."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class AuthError(FitLogError):
    """Raised on invalid credentials or a duplicate registration."""

    pass


class StoreError(FitLogError):
    """Raised when a create/read/update/delete against the record store fails."""

    def __init__(self, message: str, operation: Optional[str] = None, cause: Optional[Exception] = None):
        super().__init__(message)
        self.operation = operation
        self.cause = cause


class AiServiceError(FitLogError):
    """Raised when the completion service fails or returns unusable content."""

    def __init__(self, message: str, provider: Optional[str] = None, cause: Optional[Exception] = None):
        super().__init__(message)
        self.provider = provider
        self.cause = cause
