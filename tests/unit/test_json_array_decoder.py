# tests/unit/test_json_array_decoder.py
import asyncio
import json
import pytest
from blob_order_loader.errors import OrdersParseError
from blob_order_loader.services.decoding.json_array_decoder import iter_records

async def _chunks(parts):
    for p in parts:
        yield p

def decode(*parts):
    async def go():
        return [r async for r in iter_records(_chunks(parts))]
    return asyncio.run(go())

ORDERS = [
    {"id": 1, "customer": "Zoë", "items": [{"sku": "A-1", "qty": 2}], "total": 12.5},
    {"id": 2, "customer": "Ann", "items": [], "total": 0, "paid": True, "note": None},
    {"id": 3, "customer": "Bob", "tags": ["gift", "rush"], "total": 99.99},
]

def test_records_pass_through_unchanged():
    assert decode(json.dumps(ORDERS).encode()) == ORDERS

def test_chunk_boundaries_inside_tokens():
    data = json.dumps(ORDERS, ensure_ascii=False).encode("utf-8")
    # one byte at a time also splits the multi-byte "ë"
    assert decode(*[data[i:i + 1] for i in range(len(data))]) == ORDERS

def test_number_split_across_chunks():
    assert decode(b"[12", b"34, 5", b"]") == [1234, 5]

def test_floats_are_plain_floats():
    out = decode(b'[{"total": 12.5}]')
    assert type(out[0]["total"]) is float

def test_non_object_values_are_records_too():
    assert decode(b'[1, "two", [3], null]') == [1, "two", [3], None]

def test_empty_array_yields_nothing():
    assert decode(b"[]") == []
    assert decode(b"  \n", b"\xef\xbb\xbf [ ", b"]\n") == []

def test_empty_chunks_are_ignored():
    assert decode(b"", b"[1,", b"", b"2]") == [1, 2]

@pytest.mark.parametrize("parts", [
    (b'{"id": 1}',),
    (b'"orders"',),
    (),
    (b"   ", b"\n"),
])
def test_non_array_or_empty_input_fails(parts):
    with pytest.raises(OrdersParseError):
        decode(*parts)

def test_malformed_content_fails():
    with pytest.raises(OrdersParseError):
        decode(b'[{"id": 1}, oops]')

def test_trailing_content_after_array_fails():
    with pytest.raises(OrdersParseError):
        decode(b"[1] [2]")

def test_truncated_stream_fails_after_complete_records():
    seen = []

    async def go():
        async for r in iter_records(_chunks([b'[{"a":1},', b'{"b":'])):
            seen.append(r)

    with pytest.raises(OrdersParseError):
        asyncio.run(go())
    assert seen == [{"a": 1}]

def test_missing_closing_bracket_fails():
    with pytest.raises(OrdersParseError):
        decode(b'[{"a":1}')
