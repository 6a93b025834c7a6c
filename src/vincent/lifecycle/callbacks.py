"""
vincent.lifecycle.callbacks - Invoking Author Callbacks
=========================================================

Lifecycle callbacks are normally ``async def`` functions, but plain
functions are accepted as well. Every call site awaits through here so both
styles behave the same.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable


async def invoke_callback(fn: Callable[..., Any], *args: Any) -> Any:
    """Call ``fn(*args)`` and await the result if it is awaitable."""
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def error_message(exc: BaseException) -> str:
    """Message recorded on a deny/failure produced from a caught exception."""
    return str(exc) or type(exc).__name__
