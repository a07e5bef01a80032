# src/blob_order_loader/orchestrators/drop_orders_usecase.py
import logging

from ..domain.models import DropResult
from ..errors import StoreConnectionError, StoreOperationError
from ..ports.order_store import OrderStore

log = logging.getLogger(__name__)

DROPPED = DropResult(200, "Orders Deleted")
FAILED = DropResult(500, "An error occurred while deleting the orders.")

async def run(store: OrderStore) -> DropResult:
    async with store:
        try:
            await store.connect()
            await store.drop()
        except (StoreConnectionError, StoreOperationError) as e:
            log.error("An error occurred: %s", e)
            return FAILED
    return DROPPED
