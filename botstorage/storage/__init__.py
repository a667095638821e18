"""
Table-backed record storage.

Collections of JSON records persisted one row per record in a remote
partitioned table store, with tables provisioned on first use.
"""

from .client import (
    TableStoreClient,
    TableStoreClientError,
    TableNotFoundError,
    RowNotFoundError,
)
from .collection import Collection
from .exceptions import (
    StorageError,
    ConfigurationError,
    ProvisionError,
    NotFoundError,
    NotFound,
    InvalidRecordError,
    DecodeError,
    StoreError,
)
from .memory import InMemoryTableStoreClient
from .models import Row, TableNameValidator
from .provisioner import TableProvisioner

__all__ = [
    # Client interface
    "TableStoreClient",
    "TableStoreClientError",
    "TableNotFoundError",
    "RowNotFoundError",
    "InMemoryTableStoreClient",
    # Building blocks
    "Collection",
    "TableProvisioner",
    "Row",
    "TableNameValidator",
    # Exceptions
    "StorageError",
    "ConfigurationError",
    "ProvisionError",
    "NotFoundError",
    "NotFound",
    "InvalidRecordError",
    "DecodeError",
    "StoreError",
]
