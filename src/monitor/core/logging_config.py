"""
Logging configuration for monitor.

Renders structured log lines in the Cloud Logging JSON shape: `severity`,
`timestamp` and `message` keys, the request context fields (`app`, `rid`,
`flow-id`, `root-task-id`) and, when a span is active, the
`logging.googleapis.com/*` trace correlation fields.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from opentelemetry import trace
from structlog.typing import EventDict, Processor, WrappedLogger

from monitor.core.config import get_settings
from monitor.core.context import get_context_dict

TRACE_KEY = "logging.googleapis.com/trace"
SPAN_ID_KEY = "logging.googleapis.com/spanId"
TRACE_SAMPLED_KEY = "logging.googleapis.com/trace_sampled"

# structlog method names that do not upper-case into a Cloud Logging severity
_SEVERITY_OVERRIDES = {"warn": "WARNING", "exception": "ERROR"}

_CONFIGURED = False


def add_request_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Copy the request context values onto the event."""
    for key, value in get_context_dict().items():
        event_dict.setdefault(key, value)
    return event_dict


def span_context_adder(project_id: str) -> Processor:
    """Build a processor that links the event to the active span, if any."""

    def add_span_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            trace_id = trace.format_trace_id(span_context.trace_id)
            event_dict[TRACE_KEY] = f"projects/{project_id}/traces/{trace_id}"
            event_dict[SPAN_ID_KEY] = trace.format_span_id(span_context.span_id)
            event_dict[TRACE_SAMPLED_KEY] = span_context.trace_flags.sampled
        return event_dict

    return add_span_context


def add_severity(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename structlog's `level` to Cloud Logging's `severity`."""
    level = event_dict.pop("level", method_name)
    event_dict["severity"] = _SEVERITY_OVERRIDES.get(level, level.upper())
    return event_dict


def gcp_processors(project_id: str) -> list[Processor]:
    """Processor chain shared by GCPLogger and the stdlib formatter."""
    return [
        add_request_context,
        span_context_adder(project_id),
        structlog.processors.add_log_level,
        add_severity,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.EventRenamer("message"),
    ]


def configure_logging(level: int | str | None = None, stream: TextIO | None = None) -> None:
    """Configure structlog and stdlib logging for Cloud Logging JSON output.

    Every stdlib `logging` record and every `structlog.get_logger()` event
    goes through the same processor chain, so library and service logs
    share one shape. Safe to call multiple times (no-op after first call).
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    settings = get_settings()
    level = level or settings.logging.level
    pre_chain: list[Any] = [
        structlog.stdlib.add_logger_name,
        *gcp_processors(settings.tracing.project_id),
    ]

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
        foreign_pre_chain=pre_chain,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    # Remove existing handlers to avoid duplicates
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    _CONFIGURED = True
