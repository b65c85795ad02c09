"""
Storage service: Singleton service for object storage operations

This module provides a factory building storage backends from configuration
and a singleton service that routes storage operations to the configured
backend (filesystem or S3).
"""

import logging
import threading
from typing import TYPE_CHECKING, Any, BinaryIO, Dict, Union

from .backends.abstract import AbstractStorageBackend, BlobData
from .backends.filesystem import FSStorageBackend
from .backends.s3 import S3StorageBackend
from .exceptions import StorageConfigError, StorageNotFoundError

if TYPE_CHECKING:
    from internal.config.manager import ConfigManager

logger = logging.getLogger(__name__)


def createBackend(config: Dict[str, Any]) -> AbstractStorageBackend:
    """
    Create a storage backend from the storage configuration section.

    Args:
        config: Storage configuration dictionary

    Returns:
        The configured backend instance

    Raises:
        StorageConfigError: If configuration is missing or invalid
        StorageInitError: If the backend cannot reach its storage root

    Configuration format:
        {
            "type": "fs",  # or "s3"
            "fs": {"base-dir": "./storage/objects"},
            "s3": {
                "bucket": "my-bucket",         # required
                "prefix": "",                  # optional
                "region": "us-east-1",         # optional, ambient otherwise
                "endpoint": "https://...",     # optional, S3-compatible stores
                "key-id": "...",               # optional, ambient otherwise
                "key-secret": "...",           # optional, ambient otherwise
                "connect-timeout": 10,         # optional, seconds
                "read-timeout": 60,            # optional, seconds
                "max-attempts": 3              # optional
            }
        }
    """
    if not config:
        raise StorageConfigError("Storage configuration is missing")

    storageType = config.get("type")
    if not storageType:
        raise StorageConfigError("Storage type is not specified in configuration")

    if storageType == "fs":
        fsConfig = config.get("fs")
        if not fsConfig:
            raise StorageConfigError("Filesystem storage configuration is missing")

        baseDir = fsConfig.get("base-dir")
        if not baseDir:
            raise StorageConfigError("Filesystem base-dir is not specified")

        backend: AbstractStorageBackend = FSStorageBackend(baseDir)
        logger.info(f"Initialized FSStorageBackend with base-dir: {baseDir}, dood!")
        return backend

    if storageType == "s3":
        s3Config = config.get("s3")
        if not s3Config:
            raise StorageConfigError("S3 storage configuration is missing")

        if not s3Config.get("bucket"):
            raise StorageConfigError("S3 configuration missing required parameter: bucket")

        s3Backend = S3StorageBackend(
            bucket=s3Config["bucket"],
            prefix=s3Config.get("prefix", ""),
            region=s3Config.get("region"),
            endpoint=s3Config.get("endpoint"),
            keyId=s3Config.get("key-id"),
            keySecret=s3Config.get("key-secret"),
            connectTimeout=s3Config.get("connect-timeout"),
            readTimeout=s3Config.get("read-timeout"),
            maxAttempts=s3Config.get("max-attempts"),
        )
        logger.info(f"Initialized S3StorageBackend with bucket: {s3Backend.bucket}, prefix: {s3Backend.prefix}, dood!")
        return s3Backend

    raise StorageConfigError(f"Unknown storage type: {storageType}")


class StorageService:
    """
    Singleton service for object storage operations.

    This service provides a unified interface for storing and retrieving blobs
    using different backend implementations. The backend is configured at
    initialization time through the injectConfig method.

    Supported backends:
    - fs: Filesystem-based storage
    - s3: AWS S3 or S3-compatible storage

    Usage:
        storage = StorageService.getInstance()
        storage.injectConfig(configManager)

        storage.write("reports/1.json", b"data")
        with storage.read("reports/1.json") as stream:
            data = stream.read()
        exists = storage.exists("reports/1.json")
        keys = storage.list(prefix="reports/")

    Thread Safety:
        The singleton instance creation is thread-safe using RLock.
        Backends keep no per-key state and can be shared between threads.
    """

    _instance: Union["StorageService", None] = None
    _lock = threading.RLock()

    def __new__(cls) -> "StorageService":
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
            return cls._instance

    def __init__(self):
        """Only runs once due to singleton pattern."""
        if not hasattr(self, "initialized"):
            self.backend: AbstractStorageBackend | None = None
            self.initialized = False
            logger.info("StorageService created, awaiting configuration, dood!")

    @classmethod
    def getInstance(cls) -> "StorageService":
        """
        Get singleton instance.

        Returns:
            The singleton StorageService instance
        """
        return cls()

    def injectConfig(self, configManager: "ConfigManager") -> None:
        """
        Initialize service with configuration from ConfigManager.

        Args:
            configManager: The configuration manager containing storage settings

        Raises:
            StorageConfigError: If configuration is invalid or backend creation fails
        """
        try:
            self.backend = createBackend(configManager.getStorageConfig())
        except StorageConfigError:
            raise
        except Exception as e:
            raise StorageConfigError(f"Failed to initialize storage service: {e}") from e

        self.initialized = True
        logger.info(f"StorageService initialized with {type(self.backend).__name__}, dood!")

    def _getBackend(self) -> AbstractStorageBackend:
        """
        Return the configured backend.

        Raises:
            StorageConfigError: If service is not initialized
        """
        if not self.initialized or self.backend is None:
            raise StorageConfigError("StorageService is not initialized. Call injectConfig() first, dood!")
        return self.backend

    def write(self, key: str, data: BlobData) -> None:
        """
        Store a blob under the specified key.

        Raises:
            StorageConfigError: If service is not initialized
            StorageKeyError: If the key is invalid
            StorageWriteError: If the storage operation fails
        """
        self._getBackend().write(key, data)
        logger.debug(f"Stored object with key: {key}, dood!")

    def read(self, key: str) -> BinaryIO:
        """
        Open the blob stored under the specified key. The caller closes the stream.

        Raises:
            StorageConfigError: If service is not initialized
            StorageKeyError: If the key is invalid
            StorageNotFoundError: If nothing is stored under the key
            StorageReadError: If the retrieval operation fails
        """
        try:
            stream = self._getBackend().read(key)
        except StorageNotFoundError:
            logger.debug(f"Object not found with key: {key}, dood!")
            raise
        logger.debug(f"Opened object with key: {key}, dood!")
        return stream

    def readBytes(self, key: str) -> bytes:
        """Read the whole blob stored under the specified key."""
        try:
            data = self._getBackend().readBytes(key)
        except StorageNotFoundError:
            logger.debug(f"Object not found with key: {key}, dood!")
            raise
        logger.debug(f"Read {len(data)} bytes with key: {key}, dood!")
        return data

    def exists(self, key: str) -> bool:
        """
        Check if an object exists for the specified key.

        Raises:
            StorageConfigError: If service is not initialized
            StorageKeyError: If the key is invalid
            StorageCheckError: If the existence check fails
        """
        exists = self._getBackend().exists(key)
        logger.debug(f"Existence check for key {key}: {exists}, dood!")
        return exists

    def list(self, prefix: str = "") -> list[str]:
        """
        List all keys starting with the prefix.

        Raises:
            StorageConfigError: If service is not initialized
            StorageListError: If the list operation fails
        """
        keys = self._getBackend().list(prefix=prefix)
        logger.debug(f"Listed {len(keys)} objects with prefix: '{prefix}', dood!")
        return keys
