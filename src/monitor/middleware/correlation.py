"""
Request correlation middleware.

Seeds the request context from the inbound headers so that every log line
and every outbound call made while serving the request carries the same
request id, flow id and parent span.
"""

import logging
import time
import uuid

from opentelemetry import context as otel_context
from opentelemetry import trace
from opentelemetry.trace import NonRecordingSpan
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from monitor.client.headers import FLOW_ID_HEADER
from monitor.core.config import get_settings
from monitor.core.context import clear_context, set_env, set_flow_id, set_request_id, set_service_name
from monitor.core.tracing import get_traceparent
from monitor.domain.exceptions import TraceparentError

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Middleware that binds correlation values to each request.

    On every incoming request:
    - Binds the service name and environment from settings.
    - Extracts or generates a request id (X-Request-ID header).
    - Stores the request id and the X-Flow-Id header in the request context.
    - Attaches the caller's span (proper-referer / traceparent) as the
      parent of any span started while serving the request.
    - Adds X-Request-ID to the response headers.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        settings = get_settings()
        set_service_name(settings.service_name)
        set_env(settings.env)
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        set_request_id(request_id)
        set_flow_id(request.headers.get(FLOW_ID_HEADER, ""))

        token = None
        try:
            parent = get_traceparent(request.headers)
        except TraceparentError:
            parent = None
        if parent is not None:
            token = otel_context.attach(trace.set_span_in_context(NonRecordingSpan(parent)))

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            clear_context()
            raise
        finally:
            if token is not None:
                otel_context.detach(token)

        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        response.headers[REQUEST_ID_HEADER] = request_id

        logger.info(
            "%s %s -> %d (%.2fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        clear_context()

        return response
