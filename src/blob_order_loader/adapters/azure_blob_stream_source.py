# src/blob_order_loader/adapters/azure_blob_stream_source.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Optional
from urllib.parse import quote

import httpx
from azure.storage.blob import BlobSasPermissions, generate_blob_sas

from ..errors import StreamUnavailableError
from ..ports.stream_source import StreamSource

log = logging.getLogger(__name__)

class AzureBlobStreamSource(StreamSource):
    """
    Streams a blob over plain HTTPS. The account key only signs a short-lived
    read-only SAS for the one blob; the download itself is an httpx GET read
    chunk by chunk.
    """

    def __init__(self, account_name: str, account_key: str, *,
                 timeout_sec: float = 30.0,
                 endpoint_suffix: str = "core.windows.net",
                 sas_ttl_sec: int = 3600,
                 chunk_size: int = 64 * 1024,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self._account = account_name
        self._key = account_key
        self._timeout = timeout_sec
        self._base = f"https://{account_name}.blob.{endpoint_suffix}"
        self._ttl = sas_ttl_sec
        self._chunk_size = chunk_size
        self._transport = transport

    @classmethod
    def from_config(cls, cfg) -> "AzureBlobStreamSource":
        return cls(
            cfg.storage_account_name,
            cfg.storage_account_key,
            timeout_sec=cfg.http_timeout_sec,
            endpoint_suffix=cfg.blob_endpoint_suffix,
        )

    def blob_url(self, container: str, blob_name: str) -> str:
        sas = generate_blob_sas(
            account_name=self._account,
            container_name=container,
            blob_name=blob_name,
            account_key=self._key,
            permission=BlobSasPermissions(read=True),
            expiry=datetime.now(timezone.utc) + timedelta(seconds=self._ttl),
        )
        return f"{self._base}/{quote(container)}/{quote(blob_name)}?{sas}"

    @asynccontextmanager
    async def open_stream(self, container: str, blob_name: str) -> AsyncIterator[Optional[AsyncIterator[bytes]]]:
        url = self.blob_url(container, blob_name)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                async with client.stream("GET", url) as r:
                    if r.status_code != 200:
                        log.error("blob=%s/%s download failed: http %s", container, blob_name, r.status_code)
                        yield None
                        return
                    log.info("blob=%s/%s streaming bytes=%s", container, blob_name,
                             r.headers.get("content-length", "?"))
                    yield r.aiter_bytes(self._chunk_size)
        except httpx.HTTPError as e:
            raise StreamUnavailableError(f"failed to read blob {container}/{blob_name}: {e}") from e
