"""
In-memory table store client.

Emulates Azure Table Storage semantics in process: case-insensitive table
names, per-row timestamps and ETags, and not-found failures. Used for local
development and tests.
"""

import asyncio
from collections import Counter, defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .client import (
    RowNotFoundError,
    TableNotFoundError,
    TableStoreClient,
    TableStoreClientError,
)
from .models import Row, TableNameValidator


class InMemoryTableStoreClient(TableStoreClient):
    """
    In-memory table store client.

    Storage structure:
        {table_name: {(partition_key, row_key): Row}}

    Operation calls are counted in ``calls`` and a failure can be queued for
    the next call of an operation with ``fail_next``.
    """

    def __init__(self, latency: float = 0.0):
        """
        Initialize the client with empty storage.

        Args:
            latency: Seconds each operation sleeps before touching storage,
                     to give concurrent callers a chance to interleave
        """
        self._tables: Dict[str, Dict[tuple[str, str], Row]] = {}
        self._lock = asyncio.Lock()
        self._latency = latency
        self._failures: Dict[str, List[Exception]] = defaultdict(list)
        self.calls: Counter = Counter()
        self.closed = False

    def fail_next(self, operation: str, error: Optional[Exception] = None) -> None:
        """
        Make the next call of ``operation`` raise ``error``.

        Args:
            operation: Method name, e.g. "create_table_if_not_exists"
            error: Exception to raise (defaults to a generic client error)
        """
        if error is None:
            error = TableStoreClientError(
                f"Injected failure for {operation}",
                error_code="InternalError",
                status_code=500,
            )
        self._failures[operation].append(error)

    async def _enter(self, operation: str) -> None:
        self.calls[operation] += 1
        if self._latency:
            await asyncio.sleep(self._latency)
        if self._failures[operation]:
            raise self._failures[operation].pop(0)

    def _find_table_key(self, table_name: str) -> Optional[str]:
        """Find table key with case-insensitive comparison."""
        table_name_lower = table_name.lower()
        for key in self._tables.keys():
            if key.lower() == table_name_lower:
                return key
        return None

    def _require_table(self, table_name: str) -> Dict[tuple[str, str], Row]:
        existing_key = self._find_table_key(table_name)
        if existing_key is None:
            raise TableNotFoundError(table_name)
        return self._tables[existing_key]

    def table_names(self) -> List[str]:
        return list(self._tables.keys())

    def put_raw(self, table_name: str, row: Row) -> None:
        """Store a row as-is, bypassing the client surface."""
        self._require_table(table_name)[row.key] = row

    async def create_table_if_not_exists(self, table_name: str) -> None:
        await self._enter("create_table_if_not_exists")
        is_valid, error = TableNameValidator.validate(table_name)
        if not is_valid:
            raise TableStoreClientError(error, error_code="InvalidInput", status_code=400)

        async with self._lock:
            if self._find_table_key(table_name) is None:
                self._tables[table_name] = {}

    async def upsert_row(self, table_name: str, row: Row) -> None:
        await self._enter("upsert_row")
        async with self._lock:
            rows = self._require_table(table_name)
            timestamp = datetime.now(timezone.utc)
            rows[row.key] = row.model_copy(
                update={"Timestamp": timestamp, "etag": Row.generate_etag(timestamp)}
            )

    async def get_row(self, table_name: str, partition_key: str, row_key: str) -> Row:
        await self._enter("get_row")
        async with self._lock:
            rows = self._require_table(table_name)
            key = (partition_key, row_key)
            if key not in rows:
                raise RowNotFoundError(table_name, partition_key, row_key)
            return rows[key].model_copy()

    async def delete_row(self, table_name: str, partition_key: str, row_key: str) -> None:
        await self._enter("delete_row")
        async with self._lock:
            rows = self._require_table(table_name)
            key = (partition_key, row_key)
            if key not in rows:
                raise RowNotFoundError(table_name, partition_key, row_key)
            del rows[key]

    async def scan_rows(self, table_name: str) -> List[Row]:
        await self._enter("scan_rows")
        async with self._lock:
            rows = self._require_table(table_name)
            return [rows[key].model_copy() for key in sorted(rows.keys())]

    async def close(self) -> None:
        self.closed = True
