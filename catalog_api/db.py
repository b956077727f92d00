import os
from typing import Optional, Union
from azure.cosmos.aio import CosmosClient, ContainerProxy
from azure.identity.aio import DefaultAzureCredential

from enum import Enum

from catalog_api.config import CosmosSettings, Settings, cosmos_settings_from_env
from catalog_api.logging_config import get_child_logger

logger = get_child_logger("db")


class ContainerType(str, Enum):
    PRODUCTS = "products"


class CosmosStore:
    """
    Handle on the Cosmos DB account backing the catalog.

    The client is created on first use and reused afterwards. Authenticates
    with the account key when one is configured, otherwise with
    DefaultAzureCredential (managed identity in Azure).
    """

    def __init__(self, settings: CosmosSettings):
        self.settings = settings
        self._client: Optional[CosmosClient] = None
        self._credential: Optional[DefaultAzureCredential] = None

    @property
    def containers(self):
        return {ContainerType.PRODUCTS: self.settings.products_container}

    def _ensure_client(self) -> CosmosClient:
        if self._client is not None:
            return self._client

        credential: Union[str, DefaultAzureCredential]
        if self.settings.key:
            logger.info("Creating CosmosDB client with account key")
            credential = self.settings.key
        else:
            logger.info("Creating CosmosDB client with DefaultAzureCredential")
            self._credential = DefaultAzureCredential()
            credential = self._credential

        self._client = CosmosClient(url=self.settings.endpoint, credential=credential)
        return self._client

    async def get_container(self, container_type: ContainerType = ContainerType.PRODUCTS) -> ContainerProxy:
        container_name = self.containers.get(container_type)
        if not container_name:
            raise ValueError(
                f"Container '{container_type}' not configured. "
                f"Valid options: {[c.value for c in self.containers]}"
            )

        client = self._ensure_client()
        database = client.get_database_client(self.settings.database)
        return database.get_container_client(container_name)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
        if self._credential is not None:
            await self._credential.close()
            self._credential = None


_default_store: Optional[CosmosStore] = None


def get_default_store(settings: Optional[Settings] = None) -> CosmosStore:
    """
    Get or create the process-wide store handle.

    Settings are only read when the handle does not exist yet.
    """
    global _default_store

    if _default_store is not None:
        return _default_store

    cosmos_settings = settings.cosmos if settings else cosmos_settings_from_env(os.environ)
    _default_store = CosmosStore(cosmos_settings)
    return _default_store


async def close_default_store() -> None:
    global _default_store
    if _default_store is not None:
        await _default_store.close()
        _default_store = None
