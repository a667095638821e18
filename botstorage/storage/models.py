"""
Pydantic models for rows held in the table store.

Defines the physical row layout and table naming rules.
"""

import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, ConfigDict


# Column holding the serialized record
DATA_COLUMN = "Data"


class TableNameValidator:
    """Validates Azure Table Storage table naming rules."""

    @staticmethod
    def validate(name: str) -> tuple[bool, Optional[str]]:
        """
        Validate table name against Azure rules.

        Rules:
        - 3-63 characters
        - Alphanumeric only
        - Must start with a letter
        - Case-insensitive (stored as-is but compared case-insensitively)

        Args:
            name: Table name to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not name:
            return False, "Table name cannot be empty"

        if len(name) < 3 or len(name) > 63:
            return False, f"Table name must be between 3 and 63 characters, got {len(name)}"

        if not re.match(r"^[A-Za-z][A-Za-z0-9]*$", name):
            return False, "Table name must start with a letter and contain only alphanumeric characters"

        return True, None


class Row(BaseModel):
    """
    A single row of a table.

    PartitionKey and RowKey address the row; Data carries the serialized
    record. Timestamp and ETag are managed by the store.
    """
    model_config = ConfigDict(populate_by_name=True)

    PartitionKey: str = Field(..., description="Partition key for the row")
    RowKey: str = Field(..., description="Row key for the row")
    Data: Optional[str] = Field(default=None, description="Serialized record payload")
    Timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last modification timestamp"
    )
    etag: str = Field(
        default="",
        description="ETag for optimistic concurrency",
        alias="odata.etag"
    )

    @field_validator('PartitionKey', 'RowKey')
    @classmethod
    def validate_keys_not_empty(cls, v: str) -> str:
        """Validate that keys are not empty."""
        if not v or not v.strip():
            raise ValueError("PartitionKey and RowKey cannot be empty")
        return v

    @property
    def key(self) -> tuple[str, str]:
        return (self.PartitionKey, self.RowKey)

    def to_entity(self) -> Dict[str, Any]:
        """Entity mapping sent to the store (system properties excluded)."""
        return {
            "PartitionKey": self.PartitionKey,
            "RowKey": self.RowKey,
            DATA_COLUMN: self.Data,
        }

    @classmethod
    def from_entity(
        cls,
        entity: Dict[str, Any],
        timestamp: Optional[datetime] = None,
        etag: str = "",
    ) -> "Row":
        """
        Create a row from an entity mapping returned by the store.

        Args:
            entity: Mapping with PartitionKey, RowKey and optionally Data
            timestamp: Store-reported modification time
            etag: Store-reported ETag

        Returns:
            Row instance
        """
        data = entity.get(DATA_COLUMN)
        return cls(
            PartitionKey=entity.get("PartitionKey", ""),
            RowKey=entity.get("RowKey", ""),
            Data=data if data is None or isinstance(data, str) else str(data),
            Timestamp=timestamp or datetime.now(timezone.utc),
            etag=etag or "",
        )

    @staticmethod
    def generate_etag(timestamp: Optional[datetime] = None) -> str:
        """
        Generate ETag for a row in Azure's format.

        Args:
            timestamp: Optional timestamp to use

        Returns:
            ETag string, e.g. W/"datetime'2025-12-04T10%3A30%3A00.123456Z'"
        """
        if timestamp is None:
            timestamp = datetime.now(timezone.utc)

        ts_str = timestamp.isoformat(timespec='microseconds').replace('+00:00', 'Z')
        ts_str = ts_str.replace(':', '%3A')
        return f'W/"datetime\'{ts_str}\'"'
