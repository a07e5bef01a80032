# src/blob_order_loader/ports/stream_source.py
from abc import ABC, abstractmethod
from typing import AsyncContextManager, AsyncIterator, Optional

class StreamSource(ABC):
    @abstractmethod
    def open_stream(self, container: str, blob_name: str) -> AsyncContextManager[Optional[AsyncIterator[bytes]]]:
        """
        Open the blob for forward-only reading. The context yields an async
        iterator of byte chunks, or None when the blob has no readable body.
        """
        ...
