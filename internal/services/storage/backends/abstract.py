"""
Abstract storage backend interface

This module defines the abstract base class that all storage backends must implement.
It provides a consistent interface for storage operations across different backend types.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO

from ..exceptions import StorageReadError

BlobData = bytes | BinaryIO


class AbstractStorageBackend(ABC):
    """
    Abstract base class for storage backends.

    All storage backend implementations must inherit from this class and implement
    all abstract methods. This ensures a consistent interface across different
    storage types (filesystem, S3).

    Implementations hold no per-key state, so a single instance may be shared
    between threads. Backend-specific errors must be converted into the
    storage exception hierarchy before leaving the backend.
    """

    @abstractmethod
    def write(self, key: str, data: BlobData) -> None:
        """
        Store a blob under the specified key.

        If an object with the same key already exists, it is replaced as a whole.
        When data is a stream it is read until exhausted before this method
        returns; closing it stays with the caller.

        Args:
            key: The storage key (unique identifier)
            data: Blob content as bytes or a readable binary stream

        Raises:
            StorageKeyError: If the key is invalid
            StorageWriteError: If the storage operation fails
        """
        pass

    @abstractmethod
    def read(self, key: str) -> BinaryIO:
        """
        Open the blob stored under the specified key.

        The returned stream is owned by the caller and must be closed,
        preferably with a ``with`` block.

        Args:
            key: The storage key to retrieve

        Returns:
            A readable binary stream over the whole blob

        Raises:
            StorageKeyError: If the key is invalid
            StorageNotFoundError: If nothing is stored under the key
            StorageReadError: If the retrieval fails for any other reason
        """
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        """
        Check if an object exists for the specified key.

        Args:
            key: The storage key to check

        Returns:
            True if the key exists, False otherwise

        Raises:
            StorageKeyError: If the key is invalid
            StorageCheckError: If the existence check fails
        """
        pass

    @abstractmethod
    def list(self, prefix: str = "") -> list[str]:
        """
        List all keys starting with the given prefix.

        Args:
            prefix: Optional prefix to filter keys (default: "" for all keys)

        Returns:
            List of unique keys matching the prefix. Returns empty list if no keys match.

        Raises:
            StorageListError: If the list operation fails
        """
        pass

    def readBytes(self, key: str) -> bytes:
        """
        Read the whole blob stored under the specified key.

        Args:
            key: The storage key to retrieve

        Returns:
            Blob content

        Raises:
            StorageKeyError: If the key is invalid
            StorageNotFoundError: If nothing is stored under the key
            StorageReadError: If the retrieval fails for any other reason
        """
        with self.read(key) as stream:
            try:
                return stream.read()
            except OSError as e:
                raise StorageReadError(
                    f"Failed to read object with key '{key}': {e}", originalError=e, operation="read", key=key
                ) from e
