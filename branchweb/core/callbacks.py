"""Node-style ``(error, data)`` callback delivery for async operations."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from branchweb.errors import BranchError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Callback = Callable[[BranchError | None, Any], None]


async def deliver(operation: Awaitable[T], callback: Callback | None = None) -> T | None:
    """Await an operation and report its outcome.

    Without a callback the result is returned and errors propagate. With a
    callback, it is invoked exactly once: ``callback(None, data)`` on success
    or ``callback(error, None)`` on a ``BranchError``, and the error is not
    re-raised.

    Args:
        operation: Awaitable producing the operation's data.
        callback: Optional ``(error, data)`` callable.

    Returns:
        The operation's data, or None when the error went to the callback.
    """
    if callback is None:
        return await operation

    try:
        data = await operation
    except BranchError as e:
        logger.debug(f"Delivering error to callback: {type(e).__name__}: {e}")
        callback(e, None)
        return None

    callback(None, data)
    return data
