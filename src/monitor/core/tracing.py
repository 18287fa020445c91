"""
Tracing helpers on top of the OpenTelemetry SDK.

Spans are exported to Google Cloud Trace by default. Services receive
their parent span either through the standard `traceparent` header or
through `proper-referer`, which carries the same value past load
balancers that rewrite `traceparent`.
"""

import logging
import re
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from opentelemetry import context as otel_context
from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON
from opentelemetry.trace import NonRecordingSpan, Span, SpanContext, TraceState
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from monitor.core.config import get_settings
from monitor.core.context import get_service_name, set_service_name
from monitor.domain.exceptions import TraceparentError

logger = logging.getLogger(__name__)

TRACEPARENT_HEADER = "traceparent"
PROPER_REFERER_HEADER = "proper-referer"
TRACER_PREFIX = "propertechnologies/"

_TRACE_ID_RE = re.compile(r"[0-9a-f]{32}")
_SPAN_ID_RE = re.compile(r"[0-9a-f]{16}")

_propagator = TraceContextTextMapPropagator()

__all__ = [
    "Tracer",
    "add_remote_span_context",
    "current_traceparent",
    "get_service_name",
    "get_traceparent",
    "get_tracer",
    "set_service_name",
]


class Tracer:
    """A named tracer bound to the provider that flushes its spans."""

    def __init__(self, tracer: trace.Tracer, provider: TracerProvider):
        self._tracer = tracer
        self._provider = provider

    @property
    def provider(self) -> TracerProvider:
        return self._provider

    def trace(self, name: str, fn: Callable[[], Any]) -> Any:
        """Run `fn` inside a span and flush it once finished.

        The span is renamed to the context's service name when one is set,
        so every entry point of a service shows up under the same name.
        """
        span = self._tracer.start_span(name)
        try:
            with trace.use_span(span, end_on_exit=False):
                return fn()
        finally:
            service_name = get_service_name()
            if service_name:
                span.update_name(service_name)
            span.end()
            self._provider.force_flush()

    @contextmanager
    def start(self, name: str, **kwargs: Any) -> Iterator[Span]:
        """Start a span and make it current for the duration of the block."""
        with self._tracer.start_as_current_span(name, **kwargs) as span:
            yield span


def get_tracer(name: str, exporter: SpanExporter | None = None) -> Tracer | None:
    """Build a tracer for service `name` and install its provider globally.

    Returns None when the exporter or provider cannot be created; the
    failure is logged.
    """
    try:
        return _build_tracer(name, exporter)
    except Exception as e:
        logger.error("failed to build tracer: %s", e)
        return None


def _build_tracer(name: str, exporter: SpanExporter | None) -> Tracer:
    if exporter is None:
        exporter = _cloud_trace_exporter(get_settings().tracing.project_id)

    provider = TracerProvider(
        resource=Resource.create({SERVICE_NAME: name}),
        sampler=ALWAYS_ON,
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    return Tracer(provider.get_tracer(TRACER_PREFIX + name), provider)


def _cloud_trace_exporter(project_id: str) -> SpanExporter:
    # Installed with the `gcp` extra
    from opentelemetry.exporter.cloud_trace import CloudTraceSpanExporter

    return CloudTraceSpanExporter(project_id=project_id)


def add_remote_span_context(trace_id: str, span_id: str, context: Context | None = None) -> Context:
    """Return `context` with a remote parent span built from hex ids.

    Invalid ids are logged and `context` is returned unchanged.
    """
    if context is None:
        context = otel_context.get_current()

    if not _TRACE_ID_RE.fullmatch(trace_id):
        logger.info("failed to parse traceID: %s", trace_id)
        return context
    if not _SPAN_ID_RE.fullmatch(span_id):
        logger.info("failed to parse spanID: %s", span_id)
        return context

    span_context = SpanContext(
        trace_id=int(trace_id, 16),
        span_id=int(span_id, 16),
        is_remote=True,
        trace_state=TraceState([("client_command", "run-app")]),
    )
    if not span_context.is_valid:
        logger.info("invalid remote span context: %s/%s", trace_id, span_id)
        return context

    return trace.set_span_in_context(NonRecordingSpan(span_context), context)


def _parse_traceparent(value: str | None) -> SpanContext | None:
    if not value:
        return None
    ctx = _propagator.extract(carrier={TRACEPARENT_HEADER: value})
    span_context = trace.get_current_span(ctx).get_span_context()
    return span_context if span_context.is_valid else None


def get_traceparent(headers: Mapping[str, str]) -> SpanContext:
    """Read the caller's span context from request headers.

    `proper-referer` wins over `traceparent`; raises TraceparentError when
    neither holds a valid W3C trace parent.
    """
    for header in (PROPER_REFERER_HEADER, TRACEPARENT_HEADER):
        span_context = _parse_traceparent(headers.get(header))
        if span_context is not None:
            return span_context

    raise TraceparentError(
        "no valid traceparent in request headers",
        details={"headers": [PROPER_REFERER_HEADER, TRACEPARENT_HEADER]},
    )


def current_traceparent() -> str:
    """W3C traceparent value for the active span, or "" without one."""
    carrier: dict[str, str] = {}
    _propagator.inject(carrier)
    return carrier.get(TRACEPARENT_HEADER, "")
