"""
Storage collections.

A Collection binds one table to the get/save/delete/all operations.
Operations are scheduled as asyncio tasks; each returns a task that
can be awaited and accepts an optional ``callback(error, result)``.

Two operations racing on the same id are not serialized here: the
store applies them in the order it receives them.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

from . import codec
from .callbacks import Callback, dispatch
from .client import RowNotFoundError, TableStoreClient, TableStoreClientError
from .exceptions import NotFoundError, StoreError
from .provisioner import TableProvisioner

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class Collection:
    """Get/save/delete/all over a single table."""

    def __init__(
        self,
        name: str,
        table_name: str,
        client: TableStoreClient,
        provisioner: TableProvisioner,
    ):
        self.name = name
        self.table_name = table_name
        self._client = client
        self._provisioner = provisioner

    def __repr__(self) -> str:
        return f"Collection(name={self.name!r}, table_name={self.table_name!r})"

    def get(self, record_id: str, callback: Optional[Callback] = None) -> asyncio.Task:
        """
        Look up a record by id.

        The task resolves to the stored record, or fails with NotFoundError
        if no record has that id.
        """
        return dispatch(self._get(record_id), callback)

    def save(self, record: Mapping[str, Any], callback: Optional[Callback] = None) -> asyncio.Task:
        """
        Store a record, fully replacing any record with the same id.

        Records without a usable ``id`` fail with InvalidRecordError
        before any request reaches the store.
        """
        return dispatch(self._save(record), callback)

    def delete(self, record_id: str, callback: Optional[Callback] = None) -> asyncio.Task:
        """Delete a record by id. Deleting an absent id succeeds."""
        return dispatch(self._delete(record_id), callback)

    def all(self, callback: Optional[Callback] = None) -> asyncio.Task:
        """
        Fetch every record in the collection, in no particular order.

        A single undecodable row fails the whole call with DecodeError.
        """
        return dispatch(self._all(), callback)

    async def _get(self, record_id: str) -> Record:
        row_key = codec.row_key_for(record_id)
        await self._provisioner.ensure(self.table_name)

        try:
            row = await self._client.get_row(self.table_name, codec.PARTITION_KEY, row_key)
        except RowNotFoundError as e:
            logger.debug(f"Record {row_key} not found in {self.table_name}")
            raise NotFoundError(self.table_name, row_key) from e
        except TableStoreClientError as e:
            raise self._store_error("get", e) from e

        return codec.decode(row, self.table_name)

    async def _save(self, record: Mapping[str, Any]) -> None:
        row = codec.encode(record)
        await self._provisioner.ensure(self.table_name)

        try:
            await self._client.upsert_row(self.table_name, row)
        except TableStoreClientError as e:
            raise self._store_error("save", e) from e

        logger.debug(f"Saved record {row.RowKey} to {self.table_name}")

    async def _delete(self, record_id: str) -> None:
        row_key = codec.row_key_for(record_id)
        await self._provisioner.ensure(self.table_name)

        try:
            await self._client.delete_row(self.table_name, codec.PARTITION_KEY, row_key)
        except RowNotFoundError:
            logger.debug(f"Record {row_key} already absent from {self.table_name}")
        except TableStoreClientError as e:
            raise self._store_error("delete", e) from e

    async def _all(self) -> List[Record]:
        await self._provisioner.ensure(self.table_name)

        try:
            rows = await self._client.scan_rows(self.table_name)
        except TableStoreClientError as e:
            raise self._store_error("all", e) from e

        return [codec.decode(row, self.table_name) for row in rows]

    def _store_error(self, operation: str, error: TableStoreClientError) -> StoreError:
        logger.warning(f"{operation} on {self.table_name} failed: {error}")
        return StoreError(
            f"{operation} on table '{self.table_name}' failed: {error.message}",
            store_error_code=error.error_code,
            status_code=error.status_code,
        )
