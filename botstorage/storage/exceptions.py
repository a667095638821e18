"""
Storage Exceptions.

Error taxonomy delivered to callers of the storage collections. Only
"not found" is distinguished from other store failures; everything else
the table store reports surfaces as StoreError.
"""

from typing import Optional


class StorageError(Exception):
    """Base exception for all storage errors."""

    def __init__(self, message: str, error_code: str = "StorageError"):
        """Initialize storage error.

        Args:
            message: Error message
            error_code: Stable error code callers may branch on
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class ConfigurationError(StorageError):
    """Raised synchronously when storage configuration is unusable."""

    def __init__(self, message: str):
        super().__init__(message, error_code="InvalidConfiguration")


class ProvisionError(StorageError):
    """Raised when a table could not be created or confirmed."""

    def __init__(self, table_name: str, reason: str):
        """Initialize provisioning error.

        Args:
            table_name: Table that failed to provision
            reason: Underlying failure description
        """
        message = f"Failed to provision table '{table_name}': {reason}"
        super().__init__(message, error_code="TableProvisioningFailed")
        self.table_name = table_name


class NotFoundError(StorageError):
    """Raised when no record with the requested id exists."""

    def __init__(self, table_name: str, record_id: str):
        message = f"Record '{record_id}' not found in table '{table_name}'"
        super().__init__(message, error_code="NotFound")
        self.table_name = table_name
        self.record_id = record_id


# Short alias matching the error code
NotFound = NotFoundError


class InvalidRecordError(StorageError):
    """Raised when a record or id is rejected before reaching the store."""

    def __init__(self, message: str):
        super().__init__(message, error_code="InvalidRecord")


class DecodeError(StorageError):
    """Raised when a stored payload cannot be parsed back into a record."""

    def __init__(self, table_name: str, row_key: str, reason: str):
        """Initialize decode error.

        Args:
            table_name: Table holding the corrupt row
            row_key: Row key of the corrupt row
            reason: Parser failure description
        """
        message = f"Cannot decode row '{row_key}' in table '{table_name}': {reason}"
        super().__init__(message, error_code="DecodeError")
        self.table_name = table_name
        self.row_key = row_key


class StoreError(StorageError):
    """Raised for any other failure reported by the table store."""

    def __init__(
        self,
        message: str,
        store_error_code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        """Initialize store error.

        Args:
            message: Error message
            store_error_code: Error code reported by the table store, if any
            status_code: HTTP status reported by the table store, if any
        """
        super().__init__(message, error_code="StoreError")
        self.store_error_code = store_error_code
        self.status_code = status_code
