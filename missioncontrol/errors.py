"""
Error codes, error payloads and the response wrapper shared by all handlers.

Every handler reports through a response sink exactly once. Failures are
terminal for the invocation; nothing here retries.
"""

import functools
from typing import Any, Callable, Dict, Mapping

from .logger import get_logger


class ErrorCodes:
    INVALID_REQUEST = "INVALID_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"


def error_shape(code: str, message: str, details: Any = None) -> Dict[str, Any]:
    """Build the structured error passed to the response sink."""
    error: Dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return error


class MissionControlError(Exception):
    """Base exception carrying an error code for the caller."""

    def __init__(self, code: str, message: str, details: Any = None):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)

    def to_error(self) -> Dict[str, Any]:
        return error_shape(self.code, self.message, self.details)


class InvalidRequestError(MissionControlError):
    """Missing or malformed caller input."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(ErrorCodes.INVALID_REQUEST, message, details)


class NotFoundError(MissionControlError):
    """Lookup by id yielded no row."""

    def __init__(self, message: str = "Job not found"):
        super().__init__(ErrorCodes.NOT_FOUND, message)


class NotImplementedFeatureError(MissionControlError):
    """Placeholder operation."""

    def __init__(self, message: str):
        super().__init__(ErrorCodes.NOT_IMPLEMENTED, message)


def responds(method: str, failure_message: str):
    """
    Decorator turning a handler's return value or exception into one respond call.

    The wrapped function receives params and returns the success payload.
    MissionControlError keeps its own code; any other exception becomes
    INTERNAL_ERROR with the underlying error text. Requests and failures
    are counted on the global logger.

    Args:
        method: Operation name, used for logging and metrics
        failure_message: Prefix for INTERNAL_ERROR messages

    Example:
        @responds("missionControl.get", "Failed to get job")
        def get_job(params):
            return {"ok": True, "job": ...}
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(params: Any, respond: Callable) -> None:
            logger = get_logger()
            logger.record_request(method)
            logger.debug(f"{method} requested")
            # Non-mapping params carry no fields
            if not isinstance(params, Mapping):
                params = {}
            try:
                payload = func(params)
            except MissionControlError as e:
                error = e.to_error()
                logger.warning(f"{method} rejected", code=e.code, error=e.message)
            except Exception as e:
                error = error_shape(ErrorCodes.INTERNAL_ERROR, f"{failure_message}: {e}")
                logger.error(f"{method} failed", error=str(e), error_type=type(e).__name__)
            else:
                respond(True, payload, None)
                return

            logger.record_failure(method, error["code"])
            respond(False, None, error)

        return wrapper
    return decorator
