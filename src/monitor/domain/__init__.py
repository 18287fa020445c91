"""Monitor Domain Layer."""

from monitor.domain.models import (
    CorrelationContext,
    MultipartFile,
    RawResponse,
)

from monitor.domain.exceptions import (
    MonitorError,
    # HTTP client
    ConstructionError,
    ExecutionError,
    TransportFailure,
    StatusFailure,
    # Tracing
    TraceparentError,
    # Coded errors
    ProperError,
    ERR_FAILED_TO_LOGIN,
    ERR_ACCOUNT_NOT_FOUND,
    ERR_SECOND_FACTOR_AUTH,
    ERR_LAUNCHING_BOT,
)

__all__ = [
    # Models
    "CorrelationContext",
    "MultipartFile",
    "RawResponse",
    # Exceptions
    "MonitorError",
    "ConstructionError",
    "ExecutionError",
    "TransportFailure",
    "StatusFailure",
    "TraceparentError",
    "ProperError",
    "ERR_FAILED_TO_LOGIN",
    "ERR_ACCOUNT_NOT_FOUND",
    "ERR_SECOND_FACTOR_AUTH",
    "ERR_LAUNCHING_BOT",
]
