import asyncio
import logging
from weakref import WeakKeyDictionary

logger = logging.getLogger(__name__)

_background_tasks: WeakKeyDictionary[asyncio.AbstractEventLoop, set[asyncio.Task]] = WeakKeyDictionary()


def register_background_task(task: asyncio.Task) -> None:
    loop = asyncio.get_running_loop()
    tasks = _background_tasks.get(loop)
    if tasks is None:
        tasks = set()
        _background_tasks[loop] = tasks
    tasks.add(task)
    task.add_done_callback(tasks.discard)


def pending_background_tasks() -> list[asyncio.Task]:
    loop = asyncio.get_running_loop()
    return [task for task in _background_tasks.get(loop, set()) if not task.done()]


async def drain_background_tasks(grace_seconds: float = 0.0) -> None:
    tasks = pending_background_tasks()
    if not tasks:
        return
    if grace_seconds > 0:
        # Let in-flight order updates finish before forcing cancellation.
        _, tasks = await asyncio.wait(tasks, timeout=grace_seconds)
    if tasks:
        logger.warning("Cancelling %d pending background task(s) on shutdown", len(tasks))
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
