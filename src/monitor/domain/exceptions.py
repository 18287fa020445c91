"""
Domain-level exceptions.

Hierarchical exceptions allow catching at different granularities.
"""


class MonitorError(Exception):
    """Base exception for all monitor errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "message": self.message,
            "details": self.details,
            "type": type(self).__name__,
        }


# =============================================================================
# HTTP CLIENT EXCEPTIONS
# =============================================================================

class ConstructionError(MonitorError):
    """Request could not be built (bad method, URL, field or file stream)."""
    pass


class ExecutionError(MonitorError):
    """Request was built but sending it did not produce a usable response."""
    pass


class TransportFailure(ExecutionError):
    """
    The transport failed before a full response was read.

    Triggers:
    - Connection refused / DNS failure
    - Timeout
    - Body read interrupted
    """

    def __init__(self, message: str, cause: BaseException, details: dict | None = None):
        super().__init__(message, details)
        self.cause = cause


class StatusFailure(ExecutionError):
    """Server answered with a status outside [200, 300)."""

    def __init__(self, status_code: int, body: bytes = b"", details: dict | None = None):
        if body:
            message = f"status {status_code}, message {body.decode('utf-8', errors='replace')}"
        else:
            message = f"status {status_code}"
        super().__init__(message, details)
        self.status_code = status_code
        self.body = body

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["status_code"] = self.status_code
        return result


# =============================================================================
# TRACING EXCEPTIONS
# =============================================================================

class TraceparentError(MonitorError):
    """No valid W3C trace parent could be read from the headers."""
    pass


# =============================================================================
# CODED ERRORS
# =============================================================================

ERROR_DOCS_URL = "https://ledgerlord.proper.ai/errors/"


class ProperError(MonitorError):
    """
    Coded error shared across services.

    The catalogue instances below are module-level singletons, so `wrap`
    returns a copy instead of mutating them.
    """

    def __init__(
        self,
        id: str,
        error: str,
        description: str | None = None,
        wrapped: BaseException | None = None,
    ):
        self.id = id
        self.error = error
        self.description = description or ERROR_DOCS_URL + id
        self.wrapped = wrapped
        super().__init__(self._format())

    def _format(self) -> str:
        text = f"{self.id}: {self.error} desc:{self.description}"
        if self.wrapped is not None:
            text += f" w:{self.wrapped}"
        return text

    def wrap(self, exc: BaseException) -> "ProperError":
        """Return a copy of this error carrying `exc` as its cause."""
        wrapped = ProperError(self.id, self.error, self.description, exc)
        wrapped.__cause__ = exc
        return wrapped

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "error": self.error,
            "description": self.description,
            "info": str(self.wrapped) if self.wrapped is not None else None,
        }


ERR_FAILED_TO_LOGIN = ProperError("0001", "Failed to login")
ERR_ACCOUNT_NOT_FOUND = ProperError("0002", "Account not found")
ERR_SECOND_FACTOR_AUTH = ProperError("0003", "Error during second factor authentication")
ERR_LAUNCHING_BOT = ProperError("0004", "Error while launching bot")
