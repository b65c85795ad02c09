"""
Storage service exceptions

This module defines the exception hierarchy for the storage service.
All storage-related errors inherit from StorageError base class.

Operation failures (write/read/check/list/init) share StorageBackendError
as a parent so callers can catch any backend fault at once, while absence
of a key is reported through StorageNotFoundError, which is not a backend
fault and must be handled as a normal branch.
"""

from typing import Optional


class StorageError(Exception):
    """
    Base exception for all storage service errors.

    Catch this to handle any storage service error generically.
    """

    pass


class StorageKeyError(StorageError):
    """
    Exception raised when a storage key is invalid.

    This exception is raised when a key fails validation, such as:
    - Is empty or only whitespace
    - Exceeds maximum length
    - Contains control characters or backslashes
    - Is absolute or contains empty, "." or ".." segments
    """

    pass


class StorageConfigError(StorageError):
    """
    Exception raised when storage configuration is invalid.

    This exception is raised when:
    - Required configuration parameters are missing
    - Backend type is not recognized
    - The storage service is used before being configured
    """

    pass


class StorageNotFoundError(StorageError):
    """
    Exception raised when no blob is stored under the requested key.

    Args:
        key: The key that was looked up
    """

    def __init__(self, key: str):
        super().__init__(f"Object with key '{key}' not found")
        self.key = key


class StorageBackendError(StorageError):
    """
    Exception raised when a storage backend operation fails.

    This exception wraps backend-specific errors such as:
    - File system I/O errors
    - Network errors for remote storage
    - Permission errors
    - Backend service unavailable

    Args:
        message: Description of the backend error
        originalError: The original exception that caused this error (optional)
        operation: Name of the failed operation (optional)
        key: Storage key the operation was working on (optional)
    """

    def __init__(
        self,
        message: str,
        originalError: Optional[Exception] = None,
        operation: Optional[str] = None,
        key: Optional[str] = None,
    ):
        super().__init__(message)
        self.originalError = originalError
        self.operation = operation
        self.key = key


class StorageInitError(StorageBackendError):
    """Backend cannot be constructed: unusable base directory, bad bucket, unreachable store."""

    pass


class StorageWriteError(StorageBackendError):
    """Writing a blob failed."""

    pass


class StorageReadError(StorageBackendError):
    """Reading a blob failed for a reason other than absence."""

    pass


class StorageCheckError(StorageBackendError):
    """Existence check failed for a reason other than absence."""

    pass


class StorageListError(StorageBackendError):
    """Listing keys failed."""

    pass
