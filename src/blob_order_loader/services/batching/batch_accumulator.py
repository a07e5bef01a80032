# src/blob_order_loader/services/batching/batch_accumulator.py
import asyncio
import logging
from typing import List, Set

from ...config import DEFAULT_BATCH_SIZE
from ...domain.models import IngestStats, Record
from ...ports.sink import RecordSink

log = logging.getLogger(__name__)

class BatchAccumulator:
    """
    Groups records into batches of ``batch_size`` and hands each full batch to
    the sink as its own task, so decoding keeps going while an insert runs.

    At most ``max_in_flight`` inserts are outstanding; ``accept`` waits for a
    free slot before dispatching another batch. Tasks are created in fill
    order, so the sink sees batches in stream order.

    A failed insert is logged and counted, the records in it are lost, and
    the remaining batches carry on.
    """

    def __init__(
        self,
        sink: RecordSink,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_in_flight: int = 1,
        label: str = "",
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if max_in_flight < 1:
            raise ValueError("max_in_flight must be >= 1")
        self.sink = sink
        self.batch_size = batch_size
        self.label = label
        self.stats = IngestStats()
        self._batch: List[Record] = []
        self._tasks: Set[asyncio.Task] = set()
        self._slots = asyncio.Semaphore(max_in_flight)
        self._finished = False

    async def accept(self, record: Record) -> None:
        if self._finished:
            raise RuntimeError("accumulator already finished")
        self._batch.append(record)
        self.stats.records += 1
        if len(self._batch) >= self.batch_size:
            await self._dispatch()

    async def finish(self) -> IngestStats:
        """Flush the trailing batch, then wait for every outstanding insert."""
        if self._finished:
            raise RuntimeError("accumulator already finished")
        self._finished = True
        if self._batch:
            log.info("blob=%s processing final batch of %d items", self.label, len(self._batch))
            await self._dispatch()
        if self._tasks:
            await asyncio.gather(*self._tasks)
        return self.stats

    async def abort(self, *, cancel_in_flight: bool = True) -> None:
        """
        Drop the unflushed batch. Inserts already dispatched are cancelled, or
        awaited to completion when ``cancel_in_flight`` is False.
        """
        self._finished = True
        dropped = len(self._batch)
        self._batch = []
        if cancel_in_flight:
            for task in list(self._tasks):
                task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        if dropped:
            log.warning("blob=%s discarded unflushed records=%d", self.label, dropped)

    # ---------- internals ----------
    async def _dispatch(self) -> None:
        batch, self._batch = self._batch, []
        await self._slots.acquire()
        index = self.stats.batches
        self.stats.batches += 1
        task = asyncio.create_task(self._flush(index, batch))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _flush(self, index: int, batch: List[Record]) -> None:
        n = len(batch)
        try:
            log.info("blob=%s processing batch=%d items=%d", self.label, index, n)
            await self.sink.insert_batch(batch)
        except Exception as e:
            self.stats.failed_batches += 1
            self.stats.failed_records += n
            self.stats.failed_batch_indexes.append(index)
            log.error("blob=%s error inserting batch=%d items=%d: %s", self.label, index, n, e)
        else:
            self.stats.inserted_records += n
            log.info("blob=%s inserted batch=%d items=%d", self.label, index, n)
        finally:
            self._slots.release()
