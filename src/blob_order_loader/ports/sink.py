# src/blob_order_loader/ports/sink.py
from abc import ABC, abstractmethod
from typing import Sequence
from ..domain.models import Record

class RecordSink(ABC):
    """Bulk-insert target for one batch of records (memory/DB)."""
    @abstractmethod
    async def insert_batch(self, records: Sequence[Record]) -> None: ...
