"""
Request context variables for cross-cutting concerns.

Uses Python's contextvars to propagate request-scoped values
(request id, flow id, service name...) through the async call chain
without explicit passing. Missing values read as an empty string.
"""

from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
flow_id_var: ContextVar[str] = ContextVar("flow_id", default="")
root_task_id_var: ContextVar[str] = ContextVar("root_task_id", default="")
debug_var: ContextVar[str] = ContextVar("debug", default="")
env_var: ContextVar[str] = ContextVar("env", default="")
service_name_var: ContextVar[str] = ContextVar("service_name", default="")
aws_task_id_var: ContextVar[str] = ContextVar("aws_task_id", default="")
bot_name_var: ContextVar[str] = ContextVar("bot_name", default="")

# Log field name -> context variable
_LOG_FIELDS: dict[str, ContextVar[str]] = {
    "app": service_name_var,
    "rid": request_id_var,
    "flow-id": flow_id_var,
    "root-task-id": root_task_id_var,
    "aws-task-id": aws_task_id_var,
    "botname": bot_name_var,
}

_ALL_VARS = (
    request_id_var,
    flow_id_var,
    root_task_id_var,
    debug_var,
    env_var,
    service_name_var,
    aws_task_id_var,
    bot_name_var,
)


def get_request_id() -> str:
    """Get the current request's id."""
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    """Set the id for the current request."""
    request_id_var.set(request_id)


def get_flow_id() -> str:
    """Get the correlation id shared by every request of the current flow."""
    return flow_id_var.get()


def set_flow_id(flow_id: str) -> None:
    flow_id_var.set(flow_id)


def get_root_task_id() -> str:
    return root_task_id_var.get()


def set_root_task_id(task_id: str) -> None:
    root_task_id_var.set(task_id)


def get_debug() -> str:
    return debug_var.get()


def get_env() -> str:
    return env_var.get()


def set_env(env: str) -> None:
    env_var.set(env)


def get_service_name() -> str:
    return service_name_var.get()


def set_service_name(name: str) -> None:
    service_name_var.set(name)


def get_aws_task_id() -> str:
    return aws_task_id_var.get()


def set_aws_task_id(task_id: str) -> None:
    aws_task_id_var.set(task_id)


def get_bot_name() -> str:
    return bot_name_var.get()


def set_bot_name(name: str) -> None:
    bot_name_var.set(name)


def is_prod() -> bool:
    return get_env() == "prod"


def is_debug_on() -> bool:
    """Debug is on when explicitly enabled or when running locally."""
    return get_debug() == "true" or get_env() == "local"


def set_debug_on() -> None:
    debug_var.set("true")


def get_context_dict() -> dict[str, str]:
    """
    Get the current context as a dict for log enrichment.

    Returns:
        Dict keyed by log field name, non-empty values only
    """
    return {field: var.get() for field, var in _LOG_FIELDS.items() if var.get()}


def clear_context() -> None:
    """Reset all context vars (called at request end)."""
    for var in _ALL_VARS:
        var.set("")
