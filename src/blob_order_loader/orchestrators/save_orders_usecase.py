# src/blob_order_loader/orchestrators/save_orders_usecase.py
import asyncio
import logging
from typing import AsyncIterator, Optional

from ..config import IngestConfig
from ..domain.models import BLOB_CREATED, BlobCreatedEvent, IngestResult, IngestStats, Phase
from ..errors import OrdersParseError, StoreConnectionError, StreamUnavailableError
from ..ports.order_store import OrderStore
from ..ports.stream_source import StreamSource
from ..services.batching.batch_accumulator import BatchAccumulator
from ..services.decoding.json_array_decoder import iter_records

log = logging.getLogger(__name__)

class SaveOrdersUseCase:
    """
    One blob-created event, start to finish:

        idle -> validating -> fetching -> streaming -> flushing -> closing -> done

    Filtered events end in ``skipped``; a missing blob body, an unreachable
    store or malformed JSON end in ``aborted``. The store handle is entered
    before anything is opened, so ``store.close()`` runs exactly once per
    run whatever the outcome.
    """

    def __init__(self, cfg: IngestConfig, source: StreamSource, store: OrderStore):
        self.cfg = cfg
        self.source = source
        self.store = store
        self.phase = Phase.IDLE

    def _enter(self, phase: Phase) -> None:
        log.debug("phase %s -> %s", self.phase.value, phase.value)
        self.phase = phase

    def _skip(self, reason: str, blob_name: Optional[str] = None) -> IngestResult:
        self._enter(Phase.SKIPPED)
        return IngestResult(phase=Phase.SKIPPED, blob_name=blob_name, reason=reason)

    async def run(self, event: BlobCreatedEvent) -> IngestResult:
        container = self.cfg.container_name
        self._enter(Phase.VALIDATING)
        if event.event_type != BLOB_CREATED:
            log.debug("ignoring event type=%s", event.event_type)
            return self._skip(f"event type {event.event_type!r}")
        blob_name = event.blob_name(container)
        if blob_name is None:
            log.debug("ignoring subject=%s", event.subject)
            return self._skip(f"subject outside container {container!r}")
        if not blob_name:
            log.info("Exiting as blob not inserted in configured container: %s", container)
            return self._skip("empty blob name")

        self._enter(Phase.FETCHING)
        acc = BatchAccumulator(
            self.store,
            batch_size=self.cfg.batch_size,
            max_in_flight=self.cfg.max_in_flight,
            label=blob_name,
        )
        try:
            async with self.store:
                async with self.source.open_stream(container, blob_name) as chunks:
                    if chunks is None:
                        raise StreamUnavailableError("Failed to get readable stream from blob.")
                    await self.store.connect()
                    self._enter(Phase.STREAMING)
                    await self._pump(chunks, acc)
                self._enter(Phase.CLOSING)
        except (StreamUnavailableError, StoreConnectionError, OrdersParseError) as e:
            log.error("blob=%s aborted during %s: %s", blob_name, self.phase.value, e)
            self._enter(Phase.ABORTED)
            return IngestResult(phase=Phase.ABORTED, blob_name=blob_name, reason=str(e), stats=acc.stats)

        self._enter(Phase.DONE)
        s = acc.stats
        log.info(
            "Finished processing blob data. blob=%s records=%d batches=%d failed_batches=%d failed_records=%d",
            blob_name, s.records, s.batches, s.failed_batches, s.failed_records,
        )
        return IngestResult(phase=Phase.DONE, blob_name=blob_name, stats=s)

    async def _pump(self, chunks: AsyncIterator[bytes], acc: BatchAccumulator) -> IngestStats:
        try:
            async for record in iter_records(chunks):
                await acc.accept(record)
            self._enter(Phase.FLUSHING)
            return await acc.finish()
        except asyncio.CancelledError:
            # deadline hit: in-flight inserts are abandoned
            await acc.abort()
            raise
        except Exception:
            # batches already handed to the store stay committed
            await acc.abort(cancel_in_flight=False)
            raise

async def run(event: BlobCreatedEvent, cfg: IngestConfig, source: StreamSource, store: OrderStore) -> IngestResult:
    return await SaveOrdersUseCase(cfg, source, store).run(event)
