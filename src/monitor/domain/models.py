"""
Value objects passed through the HTTP client.

No external dependencies - only Python standard library.
"""

from dataclasses import dataclass, field
from typing import BinaryIO


@dataclass(frozen=True)
class CorrelationContext:
    """Correlation metadata propagated on every outbound request.

    Empty values are not sent.
    """
    flow_id: str = ""
    traceparent: str = ""


@dataclass(frozen=True)
class MultipartFile:
    """The single file part of a multipart/form-data body."""
    field_name: str
    file_name: str
    reader: BinaryIO | bytes


@dataclass(frozen=True)
class RawResponse:
    """Status and fully buffered body, whatever the status was."""
    status_code: int
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300
