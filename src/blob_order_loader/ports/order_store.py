# src/blob_order_loader/ports/order_store.py
from abc import abstractmethod
from .sink import RecordSink

class OrderStore(RecordSink):
    """
    A RecordSink that owns a connection. One instance per invocation;
    close() must be safe to call on a store that never connected.
    """
    @abstractmethod
    async def connect(self) -> None: ...
    @abstractmethod
    async def drop(self) -> None: ...
    @abstractmethod
    async def close(self) -> None: ...

    async def __aenter__(self): return self
    async def __aexit__(self, exc_type, exc, tb): await self.close()
