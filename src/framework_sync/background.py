"""Detached fire-and-forget tasks whose failures only reach the log."""

import asyncio
import logging

logger = logging.getLogger(__name__)

# Strong references so the event loop does not drop running tasks
_tasks = set()


def _ignore_error(task):
    _tasks.discard(task)
    if task.cancelled():
        return
    err = task.exception()
    if err is not None:
        logger.info(f"This error will be ignored: {task.get_name()}: {err!r}")


def spawn(coro, description=None):
    """Run a coroutine without awaiting it.

    Outside a running loop the coroutine is closed unrun and None is returned.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.warning(f"No running event loop, dropping {description or coro!r}")
        coro.close()
        return None
    task = loop.create_task(coro, name=description)
    _tasks.add(task)
    task.add_done_callback(_ignore_error)
    return task


def pending():
    """Tasks spawned and not finished yet."""
    return set(_tasks)


async def drain():
    """Wait for the tasks spawned on the running loop before it shuts down."""
    loop = asyncio.get_running_loop()
    while True:
        tasks = [task for task in pending() if task.get_loop() is loop]
        if not tasks:
            return
        await asyncio.gather(*tasks, return_exceptions=True)
