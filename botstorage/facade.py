"""
Storage facade for bots.

Supports storage of data on a team-by-team, user-by-user, and
channel-by-channel basis. Records are arbitrary JSON-serializable mappings
that must include an ``id`` by which they can be looked up; using the
team/user/channel id for this purpose is recommended.

Example:
    storage = create_storage({
        "storageConnectionString": "UseDevelopmentStorage=true",
        "tablePrefix": "botkit",
    })
    await storage.teams.save({"id": team_id, "foo": "bar"})
    team_data = await storage.teams.get(team_id)

    # or with a callback
    storage.users.get(user_id, lambda err, user: ...)
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from botstorage.core.config_manager import StorageConfig
from botstorage.storage.azure_client import AzureTableStoreClient
from botstorage.storage.client import TableStoreClient
from botstorage.storage.collection import Collection
from botstorage.storage.exceptions import ConfigurationError
from botstorage.storage.models import TableNameValidator
from botstorage.storage.provisioner import TableProvisioner

logger = logging.getLogger(__name__)


class Storage:
    """
    Registry of named collections sharing one client and one provisioner.

    ``teams``, ``users`` and ``channels`` are always registered; further
    collections come from config or ``register()``. Construction validates
    configuration and performs no network I/O.
    """

    def __init__(
        self,
        config: Union[StorageConfig, Mapping[str, Any], None],
        client: Optional[TableStoreClient] = None,
    ):
        """
        Initialize the storage facade.

        Args:
            config: StorageConfig or mapping with storageConnectionString and tablePrefix
            client: Table store client; defaults to an Azure client built
                    from the connection string

        Raises:
            ConfigurationError: If configuration is missing or invalid
        """
        self.config = StorageConfig.coerce(config)
        self._client = client if client is not None else _azure_client(self.config)
        self.provisioner = TableProvisioner(self._client)
        self._collections: Dict[str, Collection] = {}

        for name, suffix in self.config.all_collections().items():
            self.register(name, suffix)

        logger.debug(f"Storage initialized with collections: {', '.join(self.names)}")

    @property
    def client(self) -> TableStoreClient:
        return self._client

    @property
    def names(self) -> List[str]:
        return list(self._collections.keys())

    @property
    def teams(self) -> Collection:
        return self._collections["teams"]

    @property
    def users(self) -> Collection:
        return self._collections["users"]

    @property
    def channels(self) -> Collection:
        return self._collections["channels"]

    def register(self, name: str, suffix: str) -> Collection:
        """
        Register a collection stored in table ``<tablePrefix><suffix>``.

        Raises:
            ConfigurationError: If the table name is invalid or the name is taken
        """
        if name in self._collections:
            raise ConfigurationError(f"Collection '{name}' is already registered")

        table_name = self.config.table_name(suffix)
        is_valid, error = TableNameValidator.validate(table_name)
        if not is_valid:
            raise ConfigurationError(f"Invalid table name '{table_name}' for collection '{name}': {error}")

        collection = Collection(name, table_name, self._client, self.provisioner)
        self._collections[name] = collection
        return collection

    def collection(self, name: str) -> Collection:
        """
        Look up a collection by name.

        Raises:
            KeyError: If no collection has that name
        """
        try:
            return self._collections[name]
        except KeyError:
            raise KeyError(f"Unknown collection '{name}'. Known collections: {', '.join(self.names)}") from None

    def __getitem__(self, name: str) -> Collection:
        return self.collection(name)

    def __contains__(self, name: object) -> bool:
        return name in self._collections

    def __getattr__(self, name: str) -> Collection:
        # Only reached for names that are not regular attributes
        collections = self.__dict__.get("_collections", {})
        if name in collections:
            return collections[name]
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

    async def close(self) -> None:
        """Close the underlying table store client."""
        await self._client.close()

    async def __aenter__(self) -> "Storage":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def _azure_client(config: StorageConfig) -> TableStoreClient:
    try:
        return AzureTableStoreClient.from_connection_string(config.storage_connection_string)
    except ValueError as e:
        raise ConfigurationError(f"Invalid storage connection string: {e}") from e


def create_storage(
    config: Union[StorageConfig, Mapping[str, Any], None],
    client: Optional[TableStoreClient] = None,
) -> Storage:
    """
    Create the storage facade.

    Raises:
        ConfigurationError: If configuration is missing or invalid
    """
    return Storage(config, client=client)
