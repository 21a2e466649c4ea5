"""Fire-and-forget task scheduling with logged failures.

Tasks are held in a module-level set so they are not garbage-collected
before they finish; lifespan shutdown drains whatever is still pending.
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)

_pending: set[asyncio.Task[Any]] = set()


def _on_done(task: asyncio.Task[Any]) -> None:
    _pending.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("Background task %s failed: %s", task.get_name(), exc)


def spawn_background(coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task[Any] | None:
    """Schedule coro on the running loop without awaiting it.

    Returns None (and logs a warning) if the task cannot be scheduled; the
    caller's own result is never affected.
    """
    try:
        task = asyncio.get_running_loop().create_task(coro, name=name)
    except RuntimeError as e:
        coro.close()
        logger.warning("Could not schedule background task %s: %s", name, e)
        return None
    _pending.add(task)
    task.add_done_callback(_on_done)
    return task


def pending_count() -> int:
    return len(_pending)


async def drain_background_tasks(timeout: float = 5.0) -> None:
    """Wait up to timeout seconds for pending tasks, then cancel the rest."""
    loop = asyncio.get_running_loop()
    tasks = [t for t in _pending if t.get_loop() is loop]
    if not tasks:
        return
    _, still_pending = await asyncio.wait(tasks, timeout=timeout)
    for task in still_pending:
        task.cancel()
    if still_pending:
        logger.warning("Cancelled %d background task(s) at shutdown", len(still_pending))
