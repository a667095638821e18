"""
Table provisioning.

Ensures each table exists before it is first used, issuing at most one
create call per table at a time and none once the table is confirmed.
"""

import asyncio
import logging
from typing import Dict, FrozenSet, Set

from .client import TableStoreClient, TableStoreClientError
from .exceptions import ProvisionError

logger = logging.getLogger(__name__)


class TableProvisioner:
    """
    Tracks which tables have been confirmed to exist.

    Confirmed names are only ever added. A failed create leaves the table
    unconfirmed so the next ensure() call retries.
    """

    def __init__(self, client: TableStoreClient):
        self._client = client
        self._provisioned: Set[str] = set()
        self._locks: Dict[str, asyncio.Lock] = {}

    @property
    def provisioned_tables(self) -> FrozenSet[str]:
        return frozenset(self._provisioned)

    def is_provisioned(self, table_name: str) -> bool:
        return table_name in self._provisioned

    async def ensure(self, table_name: str) -> None:
        """
        Make sure ``table_name`` exists.

        Raises:
            ProvisionError: If the table could not be created
        """
        if table_name in self._provisioned:
            logger.debug(f"Table {table_name} already ensured")
            return

        lock = self._locks.setdefault(table_name, asyncio.Lock())
        async with lock:
            # Another caller may have finished provisioning while we waited
            if table_name in self._provisioned:
                return

            logger.info(f"Ensuring table: [{table_name}]", extra={"context": {"table": table_name}})
            try:
                await self._client.create_table_if_not_exists(table_name)
            except TableStoreClientError as e:
                logger.error(f"Failed to ensure table {table_name}: {e}")
                raise ProvisionError(table_name, str(e)) from e

            self._provisioned.add(table_name)
