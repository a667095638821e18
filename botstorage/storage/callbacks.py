"""
Callback adapter.

Each storage operation is implemented once as a coroutine. ``dispatch``
schedules it as a task that can be awaited, and optionally delivers the
outcome to a node-style ``callback(error, result)``.
"""

import asyncio
import functools
from typing import Any, Awaitable, Callable, Optional

Callback = Callable[[Optional[BaseException], Any], Any]


def dispatch(coro: Awaitable[Any], callback: Optional[Callback] = None) -> asyncio.Task:
    """
    Schedule an operation on the running event loop.

    Args:
        coro: Operation coroutine
        callback: Optional function receiving ``(error, result)`` exactly once;
                  ``error`` is None on success and ``result`` is None on failure

    Returns:
        Task resolving to the operation's result or raising its error
    """
    task = asyncio.ensure_future(coro)
    if callback is not None:
        task.add_done_callback(functools.partial(_deliver, callback))
    return task


def _deliver(callback: Callback, task: asyncio.Task) -> None:
    if task.cancelled():
        callback(asyncio.CancelledError(), None)
        return

    # Retrieving the exception marks it handled for the event loop
    error = task.exception()
    if error is not None:
        callback(error, None)
    else:
        callback(None, task.result())
