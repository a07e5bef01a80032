# tests/unit/test_azure_blob_stream_source.py
import asyncio
import base64
import httpx
import pytest
from blob_order_loader.adapters.azure_blob_stream_source import AzureBlobStreamSource
from blob_order_loader.errors import StreamUnavailableError

KEY = base64.b64encode(b"not-a-real-account-key").decode()

def make_source(handler, **kw):
    return AzureBlobStreamSource("acct", KEY, transport=httpx.MockTransport(handler), **kw)

def read_all(source, container, name):
    async def go():
        async with source.open_stream(container, name) as chunks:
            if chunks is None:
                return None
            return [c async for c in chunks]
    return asyncio.run(go())

def test_streams_blob_with_read_only_sas():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, content=b'[{"id": 1}, {"id": 2}]')

    chunks = read_all(make_source(handler, chunk_size=4), "orders", "2024/orders.json")
    assert b"".join(chunks) == b'[{"id": 1}, {"id": 2}]'
    assert len(chunks) > 1

    req = seen[0]
    assert req.method == "GET"
    assert req.url.host == "acct.blob.core.windows.net"
    assert req.url.path == "/orders/2024/orders.json"
    assert req.url.params["sp"] == "r"
    assert "sig" in req.url.params

def test_blob_name_is_url_quoted():
    source = AzureBlobStreamSource("acct", KEY, endpoint_suffix="core.chinacloudapi.cn")
    url = source.blob_url("orders", "daily batch/orders #1.json")
    assert url.startswith("https://acct.blob.core.chinacloudapi.cn/orders/daily%20batch/orders%20%231.json?")

def test_missing_blob_yields_none():
    assert read_all(make_source(lambda r: httpx.Response(404)), "orders", "gone.json") is None

def test_transport_error_is_stream_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(StreamUnavailableError):
        read_all(make_source(handler), "orders", "a.json")
