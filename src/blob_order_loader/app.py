import asyncio
import json
import logging
import os
from typing import Callable, Mapping, Optional, Tuple

import azure.functions as func

from .adapters.azure_blob_stream_source import AzureBlobStreamSource
from .adapters.mongo_order_store import MongoOrderStore
from .config import IngestConfig, StoreConfig, load_config
from .domain.models import BlobCreatedEvent, DropResult, IngestResult
from .errors import ConfigurationError
from .orchestrators import drop_orders_usecase, save_orders_usecase
from .ports.order_store import OrderStore
from .ports.stream_source import StreamSource

log = logging.getLogger(__name__)

CONFIG_MISSING = DropResult(500, "Cosmos DB configuration is missing.")

_NOISY_LOGGERS = (
    "azure",
    "azure.core.pipeline.policies.http_logging_policy",
    "httpx",
    "httpcore",
    "pymongo",
)

def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))
    # SDK request logs would also leak the SAS query string
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

def _build_providers(cfg: IngestConfig) -> Tuple[StreamSource, OrderStore]:
    return AzureBlobStreamSource.from_config(cfg), MongoOrderStore.from_config(cfg)

async def process_event(
    event: BlobCreatedEvent,
    env: Mapping[str, str],
    providers: Optional[Callable[[IngestConfig], Tuple[StreamSource, OrderStore]]] = None,
) -> Optional[IngestResult]:
    """
    Run one ingestion. Never raises: every outcome ends up in the log, and
    None is returned when the pipeline could not even start or was cut off.
    """
    try:
        cfg = load_config(env, IngestConfig)
    except ConfigurationError as e:
        log.error("saveOrders cannot run: %s", e)
        return None

    source, store = (providers or _build_providers)(cfg)
    work = save_orders_usecase.run(event, cfg, source, store)
    try:
        if cfg.deadline_sec:
            result = await asyncio.wait_for(work, cfg.deadline_sec)
        else:
            result = await work
    except asyncio.TimeoutError:
        log.error("Error processing blob: deadline of %ss exceeded subject=%s", cfg.deadline_sec, event.subject)
        return None
    except Exception:
        log.exception("Error processing blob subject=%s", event.subject)
        return None

    log.info("Event grid function processed event: type=%s subject=%s status=%s",
             event.event_type, event.subject, result.status)
    return result

async def process_drop(
    env: Mapping[str, str],
    store_factory: Optional[Callable[[StoreConfig], OrderStore]] = None,
) -> DropResult:
    try:
        cfg = load_config(env, StoreConfig)
    except ConfigurationError as e:
        log.error("dropOrders cannot run: %s", e)
        return CONFIG_MISSING
    store = (store_factory or MongoOrderStore.from_config)(cfg)
    return await drop_orders_usecase.run(store)

# ---------- Azure Functions handlers (registered in function_app.py) ----------
async def save_orders(event: func.EventGridEvent) -> None:
    await process_event(BlobCreatedEvent(event.event_type, event.subject), os.environ)

async def drop_orders(req: func.HttpRequest) -> func.HttpResponse:
    log.info("HTTP trigger function processed a request. method=%s", req.method)
    result = await process_drop(os.environ)
    return func.HttpResponse(result.body, status_code=result.status_code)

if __name__ == "__main__":
    # local run: pipe an Event Grid event JSON to stdin
    import sys
    configure_logging(os.environ.get("LOG_LEVEL", "INFO"))
    payload = json.loads(sys.stdin.read())
    if isinstance(payload, list):
        payload = payload[0]
    out = asyncio.run(process_event(BlobCreatedEvent.from_mapping(payload), os.environ))
    print(json.dumps(out.to_dict() if out else None, ensure_ascii=False))
