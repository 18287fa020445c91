"""Standard outbound headers and where their values come from."""

import httpx

from monitor.core.config import MonitorSettings, get_settings
from monitor.core.context import get_flow_id
from monitor.core.tracing import PROPER_REFERER_HEADER, TRACEPARENT_HEADER, current_traceparent
from monitor.domain.models import CorrelationContext

AUTHORIZATION_HEADER = "Authorization"
FLOW_ID_HEADER = "X-Flow-Id"
CONTENT_TYPE_HEADER = "Content-Type"


def set_authorization_header(headers: httpx.Headers, token: str) -> None:
    """Set the bearer token; without a token this is a no-op."""
    if token:
        headers[AUTHORIZATION_HEADER] = f"Bearer {token}"


def set_flow_id_header(headers: httpx.Headers, flow_id: str) -> None:
    if flow_id:
        headers[FLOW_ID_HEADER] = flow_id


def set_traceparent_headers(headers: httpx.Headers, traceparent: str) -> None:
    # proper-referer survives proxies that overwrite traceparent
    if traceparent:
        headers[PROPER_REFERER_HEADER] = traceparent
        headers[TRACEPARENT_HEADER] = traceparent


def apply_standard_headers(
    headers: httpx.Headers, token: str, correlation: CorrelationContext
) -> None:
    set_authorization_header(headers, token)
    set_flow_id_header(headers, correlation.flow_id)
    set_traceparent_headers(headers, correlation.traceparent)


def correlation_from_settings(settings: MonitorSettings | None = None) -> CorrelationContext:
    """Correlation values handed to the process through `FLOW` and `traceparent`."""
    settings = settings or get_settings()
    return CorrelationContext(
        flow_id=settings.correlation.flow_id,
        traceparent=settings.correlation.traceparent,
    )


def current_correlation(settings: MonitorSettings | None = None) -> CorrelationContext:
    """Correlation values of the request being served.

    The flow id comes from the request context and the traceparent from the
    active span; each falls back to the process-wide value when unset.
    """
    fallback = correlation_from_settings(settings)
    return CorrelationContext(
        flow_id=get_flow_id() or fallback.flow_id,
        traceparent=current_traceparent() or fallback.traceparent,
    )
