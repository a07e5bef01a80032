# src/blob_order_loader/adapters/sinks/memory_sink.py
from typing import List, Sequence
from ...ports.sink import RecordSink
from ...domain.models import Record

class MemorySink(RecordSink):
    """Keeps every batch it is given, in call order. Used for local runs."""
    def __init__(self):
        self.batches: List[List[Record]] = []

    async def insert_batch(self, records: Sequence[Record]) -> None:
        self.batches.append(list(records))

    @property
    def rows(self) -> List[Record]:
        return [r for b in self.batches for r in b]
