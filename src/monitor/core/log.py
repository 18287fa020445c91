"""
Context-bound loggers.

A service installs its logger once per request (or once at startup) with
`set_logger`; library code then calls the module-level `info`, `warning`,
`error` and `report` helpers without holding a logger reference. When no
logger was installed the plain `DefaultLogger` is used.
"""

import logging
import sys
import traceback
from contextvars import ContextVar
from typing import Any, Protocol, TextIO, runtime_checkable

import structlog

from monitor.core.config import get_settings
from monitor.core.logging_config import gcp_processors

REPORTED_ERROR_EVENT_TYPE = (
    "type.googleapis.com/google.devtools.clouderrorreporting.v1beta1.ReportedErrorEvent"
)


@runtime_checkable
class Logger(Protocol):
    def info(self, message: str, *args: Any, **fields: Any) -> None: ...

    def warning(self, message: str, *args: Any, **fields: Any) -> None: ...

    def error(self, message: str, *args: Any, **fields: Any) -> None: ...


class DefaultLogger:
    """Prints the formatted message only; structured fields are dropped."""

    def __init__(self, stream: TextIO | None = None):
        self._logger = structlog.PrintLogger(file=stream or sys.stdout)

    def info(self, message: str, *args: Any, **fields: Any) -> None:
        self._logger.msg(message % args if args else message)

    def warning(self, message: str, *args: Any, **fields: Any) -> None:
        self.info(message, *args, **fields)

    def error(self, message: str, *args: Any, **fields: Any) -> None:
        self.info(message, *args, **fields)


class GCPLogger:
    """Writes one Cloud Logging JSON object per line to `stream`."""

    def __init__(self, stream: TextIO | None = None, project_id: str | None = None):
        project_id = project_id or get_settings().tracing.project_id
        self._logger = structlog.wrap_logger(
            structlog.PrintLogger(file=stream or sys.stdout),
            processors=[*gcp_processors(project_id), structlog.processors.JSONRenderer()],
            wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
            context_class=dict,
        )

    def info(self, message: str, *args: Any, **fields: Any) -> None:
        self._logger.info(message, *args, **fields)

    def warning(self, message: str, *args: Any, **fields: Any) -> None:
        self._logger.warning(message, *args, **fields)

    def error(self, message: str, *args: Any, **fields: Any) -> None:
        self._logger.error(message, *args, **fields)


logger_var: ContextVar[Logger | None] = ContextVar("logger", default=None)


def set_logger(logger: Logger) -> None:
    """Install `logger` for the current context."""
    logger_var.set(logger)


def get_logger_or_default(default: Logger | None = None) -> Logger:
    """Return the context logger, else `default`, else a new DefaultLogger."""
    logger = logger_var.get()
    if logger is not None:
        return logger
    return default if default is not None else DefaultLogger()


def info(message: str, *args: Any, **fields: Any) -> None:
    get_logger_or_default().info(message, *args, **fields)


def warning(message: str, *args: Any, **fields: Any) -> None:
    get_logger_or_default().warning(message, *args, **fields)


def error(message: str, *args: Any, **fields: Any) -> None:
    get_logger_or_default().error(message, *args, **fields)


def report(message: str, *args: Any, **fields: Any) -> None:
    """Log at error severity as a Cloud Error Reporting event.

    The caller's stack is attached so the event groups by call site.
    """
    stack_trace = "".join(traceback.format_stack()[:-1])
    fields.setdefault("stack_trace", stack_trace)
    fields.setdefault("@type", REPORTED_ERROR_EVENT_TYPE)
    get_logger_or_default().error(message, *args, **fields)
