import asyncio
from asyncio import TaskGroup, Semaphore


class Throttler:
    """Bounds how many tasks scheduled into a TaskGroup run at the same time.

    schedule() waits for a free permit before creating the task, so a producer
    looping over a large input never holds more than `concurrency` pending
    coroutines.
    """

    def __init__(self, task_group: TaskGroup, concurrency: int):
        if concurrency <= 0:
            raise ValueError(f"concurrency must be positive: {concurrency}")

        self._task_group = task_group
        self._semaphore = Semaphore(concurrency)

    async def schedule(self, coro, name=None) -> asyncio.Task:
        """Create a task for coro once a permit is available.

        The permit is returned when the task finishes, whether it succeeds or
        raises.
        """
        await self._semaphore.acquire()

        async def wrapper():
            try:
                return await coro
            finally:
                self._semaphore.release()

        try:
            return self._task_group.create_task(wrapper(), name=name)
        except BaseException:
            self._semaphore.release()
            coro.close()
            raise
