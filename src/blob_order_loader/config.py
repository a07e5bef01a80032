# src/blob_order_loader/config.py
from typing import Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigurationError

DEFAULT_BATCH_SIZE = 100

class StoreConfig(BaseModel):
    """Settings needed to reach the order collection."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    connection_string: str = Field(alias="COSMOS_DB_CONNECTION_STRING", min_length=1)
    database_name: str = Field(alias="COSMOS_DB_NAME", min_length=1)
    collection_name: str = Field(alias="COSMOS_DB_COLLECTION", min_length=1)

class IngestConfig(StoreConfig):
    """Store settings plus the blob account and batching knobs."""
    storage_account_name: str = Field(alias="BLOB_STORAGE_NAME", min_length=1)
    storage_account_key: str = Field(alias="BLOB_STORAGE_KEY", min_length=1)
    container_name: str = Field(alias="BLOB_CONTAINER_NAME", min_length=1)

    batch_size: int = Field(DEFAULT_BATCH_SIZE, alias="ORDERS_BATCH_SIZE", ge=1)
    max_in_flight: int = Field(1, alias="ORDERS_MAX_IN_FLIGHT", ge=1)
    http_timeout_sec: float = Field(30.0, alias="BLOB_HTTP_TIMEOUT_SEC", gt=0)
    blob_endpoint_suffix: str = Field("core.windows.net", alias="BLOB_ENDPOINT_SUFFIX", min_length=1)
    deadline_sec: Optional[float] = Field(None, alias="ORDERS_DEADLINE_SEC", gt=0)

C = TypeVar("C", bound=StoreConfig)

def load_config(env: Mapping[str, str], model: Type[C] = IngestConfig) -> C:
    """
    Build a settings object from an explicit mapping (normally ``os.environ``).

    Blank values count as missing. Raises ConfigurationError naming every
    offending variable.
    """
    values = {k: v for k, v in env.items() if v is not None and str(v).strip()}
    try:
        return model.model_validate(values)
    except ValidationError as e:
        names = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise ConfigurationError(
            f"{', '.join(names)} must be set for {model.__name__}"
        ) from e
