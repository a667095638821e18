"""
Abstract Table Store Client Interface.

Defines the primitives the storage collections need from a remote,
partitioned table store, and the typed failures those primitives raise.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .models import Row


class TableStoreClientError(Exception):
    """Base exception for failures reported by a table store client."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code


class TableNotFoundError(TableStoreClientError):
    """Raised when a table is not found."""

    def __init__(self, table_name: str):
        super().__init__(
            f"Table '{table_name}' not found",
            error_code="TableNotFound",
            status_code=404,
        )
        self.table_name = table_name


class RowNotFoundError(TableStoreClientError):
    """Raised when a row is not found."""

    def __init__(self, table_name: str, partition_key: str, row_key: str):
        super().__init__(
            f"Row with PartitionKey '{partition_key}' and RowKey '{row_key}' "
            f"not found in table '{table_name}'",
            error_code="ResourceNotFound",
            status_code=404,
        )
        self.table_name = table_name
        self.partition_key = partition_key
        self.row_key = row_key


class TableStoreClient(ABC):
    """
    Abstract base class for table store clients.

    Implementations talk to Azure Table Storage or emulate it in memory.
    Every primitive either returns its value or raises a
    TableStoreClientError subclass.
    """

    @abstractmethod
    async def create_table_if_not_exists(self, table_name: str) -> None:
        """
        Create a table unless it already exists.

        Raises:
            TableStoreClientError: If the table could not be created
        """

    @abstractmethod
    async def upsert_row(self, table_name: str, row: Row) -> None:
        """
        Insert a row, fully replacing any row with the same keys.

        Raises:
            TableNotFoundError: If the table does not exist
            TableStoreClientError: If the write fails
        """

    @abstractmethod
    async def get_row(self, table_name: str, partition_key: str, row_key: str) -> Row:
        """
        Retrieve a row by its keys.

        Raises:
            RowNotFoundError: If no such row exists
            TableStoreClientError: If the read fails
        """

    @abstractmethod
    async def delete_row(self, table_name: str, partition_key: str, row_key: str) -> None:
        """
        Delete a row by its keys.

        Raises:
            RowNotFoundError: If no such row exists
            TableStoreClientError: If the delete fails
        """

    @abstractmethod
    async def scan_rows(self, table_name: str) -> List[Row]:
        """
        Return every row of a table, fully materialized.

        Raises:
            TableNotFoundError: If the table does not exist
            TableStoreClientError: If the scan fails
        """

    async def close(self) -> None:
        """Release network resources held by the client."""
