# src/blob_order_loader/adapters/mongo_order_store.py
import logging
from typing import Any, Callable, Optional, Sequence

from bson.errors import BSONError
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from ..domain.models import Record
from ..errors import BatchInsertError, StoreConnectionError, StoreOperationError
from ..ports.order_store import OrderStore

log = logging.getLogger(__name__)

class MongoOrderStore(OrderStore):
    """Order collection on a MongoDB-compatible server (Cosmos DB Mongo API)."""

    def __init__(self, connection_string: str, database: str, collection: str,
                 client_factory: Callable[[str], Any] = AsyncMongoClient):
        self._uri = connection_string
        self._db_name = database
        self._coll_name = collection
        self._client_factory = client_factory
        self._client: Optional[Any] = None
        self._collection: Optional[Any] = None

    @classmethod
    def from_config(cls, cfg) -> "MongoOrderStore":
        return cls(cfg.connection_string, cfg.database_name, cfg.collection_name)

    @property
    def connected(self) -> bool:
        return self._collection is not None

    async def connect(self) -> None:
        if self.connected:
            return
        try:
            self._client = self._client_factory(self._uri)
            # the client connects lazily; ping makes an unreachable server fail here
            await self._client.admin.command("ping")
        except PyMongoError as e:
            await self.close()
            raise StoreConnectionError(f"failed to connect to database {self._db_name}: {e}") from e
        self._collection = self._client[self._db_name][self._coll_name]
        log.info("Database connected. db=%s collection=%s", self._db_name, self._coll_name)

    def _require_collection(self):
        if self._collection is None:
            raise StoreConnectionError("store is not connected")
        return self._collection

    async def insert_batch(self, records: Sequence[Record]) -> None:
        coll = self._require_collection()
        try:
            await coll.insert_many(list(records))
        except (PyMongoError, BSONError, TypeError) as e:
            raise BatchInsertError(f"insert_many of {len(records)} records failed: {e}") from e

    async def drop(self) -> None:
        coll = self._require_collection()
        try:
            await coll.drop()
        except PyMongoError as e:
            raise StoreOperationError(f"drop of {self._coll_name} failed: {e}") from e
        log.info("collection=%s dropped", self._coll_name)

    async def close(self) -> None:
        client, self._client, self._collection = self._client, None, None
        if client is None:
            return
        try:
            await client.close()
        except PyMongoError as e:
            log.warning("error closing database connection: %s", e)
            return
        log.info("Database connection closed.")
