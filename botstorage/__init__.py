"""
botstorage: table-backed storage for chat bots

Team, user and channel records persisted in Azure Table Storage, with
tables provisioned lazily on first use.
"""

__version__ = "0.1.0"

from .facade import Storage, create_storage
from .storage.exceptions import (
    StorageError,
    ConfigurationError,
    ProvisionError,
    NotFoundError,
    NotFound,
    InvalidRecordError,
    DecodeError,
    StoreError,
)

__all__ = [
    "Storage",
    "create_storage",
    "StorageError",
    "ConfigurationError",
    "ProvisionError",
    "NotFoundError",
    "NotFound",
    "InvalidRecordError",
    "DecodeError",
    "StoreError",
    "__version__",
]
