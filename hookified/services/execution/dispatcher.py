"""Hand-off of inbound firings to background execution.

Inbound webhook and provider endpoints acknowledge immediately and submit
the firing here. Execution after the hand-off is best effort: failures are
logged and never reach the original caller.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional, Tuple

from loguru import logger

from hookified.constants import (
    FIRING_DISPATCH_BACKEND,
    FIRING_QUEUE_SIZE,
    FIRING_SHUTDOWN_TIMEOUT,
    FIRING_WORKER_CONCURRENCY,
)
from hookified.enums import FiringDispatchBackend
from hookified.services.execution.hook_executor import hook_executor
from hookified.services.execution.types import TriggerContext

FiringHandler = Callable[[str, TriggerContext], Awaitable[object]]


class DispatchQueueFull(Exception):
    """The firing could not be queued; the caller should answer 503."""


class FiringDispatcher(ABC):
    @abstractmethod
    async def submit(self, hook_id: str, trigger: TriggerContext) -> None: ...

    async def start(self) -> None:
        return None

    async def shutdown(self) -> None:
        return None


async def _execute_firing(hook_id: str, trigger: TriggerContext):
    return await hook_executor.execute_hook_by_id(hook_id, trigger)


class BoundedWorkerPool(FiringDispatcher):
    """In-process queue drained by a fixed number of worker tasks."""

    def __init__(
        self,
        handler: Optional[FiringHandler] = None,
        concurrency: int = FIRING_WORKER_CONCURRENCY,
        queue_size: int = FIRING_QUEUE_SIZE,
    ):
        self.handler = handler or _execute_firing
        self.concurrency = concurrency
        self.queue_size = queue_size
        self._queue: Optional[asyncio.Queue[Tuple[str, TriggerContext]]] = None
        self._workers: List[asyncio.Task] = []

    async def start(self) -> None:
        if self._workers:
            return
        self._queue = asyncio.Queue(maxsize=self.queue_size)
        self._workers = [
            asyncio.create_task(self._worker(i), name=f"firing-worker-{i}")
            for i in range(self.concurrency)
        ]
        logger.info(f"Started {self.concurrency} firing workers (queue size {self.queue_size})")

    async def submit(self, hook_id: str, trigger: TriggerContext) -> None:
        """Queue a firing without waiting for it to run.

        Raises:
            DispatchQueueFull: if the queue is at capacity
        """
        await self.start()
        try:
            self._queue.put_nowait((hook_id, trigger))
        except asyncio.QueueFull as e:
            logger.error(f"Firing queue full, rejecting {trigger.type.value} firing of {hook_id}")
            raise DispatchQueueFull("Firing queue is full") from e

    async def _worker(self, index: int) -> None:
        while True:
            hook_id, trigger = await self._queue.get()
            try:
                await self.handler(hook_id, trigger)
            except asyncio.CancelledError:
                logger.error(
                    f"Abandoned in-flight {trigger.type.value} firing of hook {hook_id} on shutdown"
                )
                raise
            except Exception as e:
                logger.error(
                    f"Background {trigger.type.value} firing of hook {hook_id} failed: {e}"
                )
            finally:
                self._queue.task_done()

    async def drain(self) -> None:
        """Wait until every queued firing has been processed."""
        if self._queue is not None:
            await self._queue.join()

    async def shutdown(self, timeout: float = FIRING_SHUTDOWN_TIMEOUT) -> None:
        """Give queued firings up to ``timeout`` seconds to finish, then stop.

        Firings still queued after the timeout are dropped and each one is
        logged, as is any firing a worker was running when cancelled.
        """
        if self._queue is not None and self._workers:
            try:
                await asyncio.wait_for(self.drain(), timeout)
            except asyncio.TimeoutError:
                logger.error(
                    f"Firing queue not drained within {timeout}s, "
                    f"dropping {self._queue.qsize()} queued firings"
                )
                self._drop_queued()

        for worker in self._workers:
            worker.cancel()
        if self._workers:
            await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._queue = None

    def _drop_queued(self) -> None:
        while True:
            try:
                hook_id, trigger = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            self._queue.task_done()
            logger.error(f"Dropped queued {trigger.type.value} firing of hook {hook_id} on shutdown")


class ArqFiringDispatcher(FiringDispatcher):
    """Queues firings as arq jobs run by the worker process."""

    async def submit(self, hook_id: str, trigger: TriggerContext) -> None:
        from hookified.tasks.arq import enqueue_job
        from hookified.tasks.function_names import FunctionNames

        await enqueue_job(FunctionNames.EXECUTE_HOOK_FIRING, hook_id, trigger.to_dict())

    async def start(self) -> None:
        from hookified.tasks.arq import get_arq_redis

        await get_arq_redis()


def build_firing_dispatcher(backend: str = FIRING_DISPATCH_BACKEND) -> FiringDispatcher:
    if FiringDispatchBackend(backend) == FiringDispatchBackend.ARQ:
        return ArqFiringDispatcher()
    return BoundedWorkerPool()
