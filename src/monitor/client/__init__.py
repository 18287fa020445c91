"""Outbound HTTP client with correlation headers."""

from monitor.client.client import Client
from monitor.client.headers import (
    AUTHORIZATION_HEADER,
    FLOW_ID_HEADER,
    apply_standard_headers,
    correlation_from_settings,
    current_correlation,
)
from monitor.client.transport import HTTPClient
from monitor.client.url import build_url

__all__ = [
    "AUTHORIZATION_HEADER",
    "FLOW_ID_HEADER",
    "Client",
    "HTTPClient",
    "apply_standard_headers",
    "build_url",
    "correlation_from_settings",
    "current_correlation",
]
