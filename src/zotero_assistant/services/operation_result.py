"""Shared result envelopes for public operations."""

from collections.abc import Awaitable, Callable
import functools
import logging
from typing import Any

from zotero_assistant.utils.errors import handle_error
from zotero_assistant.utils.logging_config import PerformanceMonitor

logger = logging.getLogger(__name__)


def operation_error(
    error_type: str,
    error: str,
    *,
    write: bool = False,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build a standardized error response.

    Write operations carry ``success: false``; read operations only the
    error fields.
    """
    payload: dict[str, Any] = {"success": False} if write else {}
    payload["error"] = error
    payload["error_type"] = error_type
    if extra:
        payload.update(extra)
    return payload


def operation(
    name: str, *, write: bool = False
) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Any]]]:
    """
    Decorate a public async operation so failures become structured results.

    Any exception raised by the wrapped coroutine is logged and converted
    with ``operation_error``; nothing propagates to the caller.
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                with PerformanceMonitor(logger, name):
                    return await func(*args, **kwargs)
            except Exception as e:
                error_type, message = handle_error(e, name)
                return operation_error(error_type, message, write=write)

        return wrapper

    return decorator
