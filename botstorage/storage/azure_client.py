"""
Azure Table Storage client.

Wraps azure.data.tables.aio and translates Azure SDK exceptions into the
typed failures of the TableStoreClient interface.
"""

import logging
from typing import List, NoReturn, Optional

from azure.core.exceptions import AzureError, HttpResponseError, ResourceNotFoundError
from azure.data.tables import UpdateMode
from azure.data.tables.aio import TableServiceClient

from .client import (
    RowNotFoundError,
    TableNotFoundError,
    TableStoreClient,
    TableStoreClientError,
)
from .models import Row

logger = logging.getLogger(__name__)


class AzureTableStoreClient(TableStoreClient):
    """
    Table store client backed by Azure Table Storage (or Azurite).

    Constructing the client performs no network I/O; the underlying
    HTTP session is opened on first use.
    """

    def __init__(self, service_client: TableServiceClient):
        self._service = service_client

    @classmethod
    def from_connection_string(cls, connection_string: str) -> "AzureTableStoreClient":
        """
        Build a client from an Azure Storage connection string.

        Raises:
            ValueError: If the connection string is malformed
        """
        return cls(TableServiceClient.from_connection_string(conn_str=connection_string))

    async def create_table_if_not_exists(self, table_name: str) -> None:
        try:
            await self._service.create_table_if_not_exists(table_name=table_name)
        except AzureError as e:
            _raise_translated(e, table_name)

    async def upsert_row(self, table_name: str, row: Row) -> None:
        table_client = self._service.get_table_client(table_name)
        try:
            await table_client.upsert_entity(entity=row.to_entity(), mode=UpdateMode.REPLACE)
        except AzureError as e:
            _raise_translated(e, table_name)

    async def get_row(self, table_name: str, partition_key: str, row_key: str) -> Row:
        table_client = self._service.get_table_client(table_name)
        try:
            entity = await table_client.get_entity(partition_key=partition_key, row_key=row_key)
        except AzureError as e:
            _raise_translated(e, table_name, partition_key, row_key)
        return _to_row(entity)

    async def delete_row(self, table_name: str, partition_key: str, row_key: str) -> None:
        table_client = self._service.get_table_client(table_name)
        try:
            await table_client.delete_entity(partition_key=partition_key, row_key=row_key)
        except AzureError as e:
            _raise_translated(e, table_name, partition_key, row_key)

    async def scan_rows(self, table_name: str) -> List[Row]:
        table_client = self._service.get_table_client(table_name)
        try:
            # The SDK follows continuation tokens while iterating
            return [_to_row(entity) async for entity in table_client.list_entities()]
        except AzureError as e:
            _raise_translated(e, table_name)

    async def close(self) -> None:
        await self._service.close()


def _to_row(entity) -> Row:
    metadata = getattr(entity, "metadata", None) or {}
    return Row.from_entity(
        dict(entity),
        timestamp=metadata.get("timestamp"),
        etag=metadata.get("etag") or "",
    )


def _raise_translated(
    error: AzureError,
    table_name: str,
    partition_key: Optional[str] = None,
    row_key: Optional[str] = None,
) -> NoReturn:
    """Re-raise an Azure SDK exception as a TableStoreClientError."""
    error_code = getattr(error, "error_code", None)
    status_code = getattr(error, "status_code", None)

    if isinstance(error, ResourceNotFoundError):
        if error_code == "TableNotFound" or row_key is None:
            raise TableNotFoundError(table_name) from error
        raise RowNotFoundError(table_name, partition_key, row_key) from error

    if isinstance(error, HttpResponseError):
        logger.debug(f"Table store returned HTTP {status_code} ({error_code}) for table '{table_name}'")
    raise TableStoreClientError(
        str(error),
        error_code=str(error_code) if error_code is not None else type(error).__name__,
        status_code=status_code,
    ) from error
