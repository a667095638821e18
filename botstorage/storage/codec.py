"""
Record codec.

Converts application records to and from table rows. A record is stored
whole, as JSON text in the Data column; its id is the row key and every
row of a table shares one fixed partition key.
"""

import json
import re
from collections.abc import Mapping
from typing import Any, Dict

from .exceptions import DecodeError, InvalidRecordError
from .models import Row

PARTITION_KEY = "partition"

# Azure rejects string properties longer than 32K UTF-16 code units
MAX_PAYLOAD_CHARS = 32 * 1024

# Characters Azure Table Storage forbids in PartitionKey and RowKey
_FORBIDDEN_KEY_CHARS = re.compile(r"[/\\#?\x00-\x1f\x7f-\x9f]")


def row_key_for(record_id: Any) -> str:
    """
    Map a record id to its row key.

    Raises:
        InvalidRecordError: If the id is not a usable row key
    """
    if not isinstance(record_id, str) or not record_id.strip():
        raise InvalidRecordError(f"Record id must be a non-empty string, got {record_id!r}")
    if _FORBIDDEN_KEY_CHARS.search(record_id):
        raise InvalidRecordError(
            f"Record id {record_id!r} contains characters not allowed in a row key"
        )
    return record_id


def encode(record: Any) -> Row:
    """
    Encode a record into a row.

    Args:
        record: Mapping with a non-empty string ``id``

    Returns:
        Row keyed by the record id

    Raises:
        InvalidRecordError: If the record lacks a usable id or cannot be serialized
    """
    if not isinstance(record, Mapping):
        raise InvalidRecordError(f"Record must be a mapping, got {type(record).__name__}")
    if "id" not in record:
        raise InvalidRecordError("Record must include an 'id' field")

    row_key = row_key_for(record["id"])

    try:
        payload = json.dumps(dict(record))
    except (TypeError, ValueError) as e:
        raise InvalidRecordError(f"Record '{row_key}' is not JSON-serializable: {e}") from e

    if len(payload) > MAX_PAYLOAD_CHARS:
        raise InvalidRecordError(
            f"Record '{row_key}' serializes to {len(payload)} characters, "
            f"limit is {MAX_PAYLOAD_CHARS}"
        )

    return Row(PartitionKey=PARTITION_KEY, RowKey=row_key, Data=payload)


def decode(row: Row, table_name: str) -> Dict[str, Any]:
    """
    Decode a row back into a record.

    Raises:
        DecodeError: If the Data column is missing or not a JSON object
    """
    if row.Data is None:
        raise DecodeError(table_name, row.RowKey, "row has no Data column")

    try:
        record = json.loads(row.Data)
    except ValueError as e:
        raise DecodeError(table_name, row.RowKey, str(e)) from e

    if not isinstance(record, dict):
        raise DecodeError(
            table_name, row.RowKey, f"expected a JSON object, got {type(record).__name__}"
        )
    return record
