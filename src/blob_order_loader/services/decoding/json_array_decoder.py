# src/blob_order_loader/services/decoding/json_array_decoder.py
import logging
from typing import AsyncIterable, AsyncIterator

import ijson

from ...domain.models import Record
from ...errors import OrdersParseError

log = logging.getLogger(__name__)

_BOM = b"\xef\xbb\xbf"
_WS = b" \t\r\n"

def _first_significant(chunk: bytes) -> bytes:
    head = chunk.lstrip(_WS)
    if head.startswith(_BOM):
        head = head[len(_BOM):].lstrip(_WS)
    return head

async def iter_records(chunks: AsyncIterable[bytes]) -> AsyncIterator[Record]:
    """
    Yield each element of a top-level JSON array as soon as its closing token
    has been seen. Only ijson's token buffer is held between chunks, so memory
    stays bounded by the largest single record, not by the payload.

    Raises OrdersParseError for a non-array top level, malformed content, or a
    stream that ends before the array is closed.
    """
    pending = ijson.sendable_list()
    coro = None
    closed = False
    total = 0

    try:
        async for chunk in chunks:
            if not chunk:
                continue
            if coro is None:
                head = _first_significant(chunk)
                if not head:
                    continue
                if head[:1] != b"[":
                    raise OrdersParseError(f"expected a JSON array, got {head[:1]!r}")
                coro = ijson.items_coro(pending, "item", use_float=True)
                chunk = head
            coro.send(chunk)
            if pending:
                ready = list(pending)
                del pending[:]
                for record in ready:
                    total += 1
                    yield record

        if coro is None:
            raise OrdersParseError("stream ended before a JSON array began")
        closed = True
        coro.close()
    except ijson.JSONError as e:
        raise OrdersParseError(f"invalid JSON after {total} records: {e}") from e
    finally:
        if coro is not None and not closed:
            _discard(coro)

    # close() can complete the last element
    for record in pending:
        total += 1
        yield record
    del pending[:]
    log.debug("decoded records=%d", total)

def _discard(coro) -> None:
    # consumer stopped early; the parser would only report the cut-off input
    try:
        coro.close()
    except ijson.JSONError:
        pass
