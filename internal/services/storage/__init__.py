"""
Storage service package

This package provides a unified interface for writing, reading, checking and
listing binary blobs across multiple backend implementations (Filesystem, S3).
"""

from .backends.abstract import AbstractStorageBackend
from .backends.filesystem import FSStorageBackend
from .backends.s3 import S3StorageBackend
from .exceptions import (
    StorageBackendError,
    StorageCheckError,
    StorageConfigError,
    StorageError,
    StorageInitError,
    StorageKeyError,
    StorageListError,
    StorageNotFoundError,
    StorageReadError,
    StorageWriteError,
)
from .service import StorageService, createBackend

__all__ = [
    "AbstractStorageBackend",
    "FSStorageBackend",
    "S3StorageBackend",
    "StorageBackendError",
    "StorageCheckError",
    "StorageConfigError",
    "StorageError",
    "StorageInitError",
    "StorageKeyError",
    "StorageListError",
    "StorageNotFoundError",
    "StorageReadError",
    "StorageWriteError",
    "StorageService",
    "createBackend",
]
