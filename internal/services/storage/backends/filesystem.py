"""
Filesystem storage backend implementation

This module provides a storage backend that stores objects as files
in a local directory with atomic writes and proper error handling.
"""

import os
import re
import shutil
import stat
import tempfile
from pathlib import Path
from typing import BinaryIO

from ..exceptions import (
    StorageCheckError,
    StorageInitError,
    StorageListError,
    StorageNotFoundError,
    StorageReadError,
    StorageWriteError,
)
from ..utils import KEY_SEPARATOR, validateKey
from .abstract import AbstractStorageBackend, BlobData

# Name of in-flight temporary files: ".storage-<8 random chars>.tmp"
TEMP_FILE_PREFIX = ".storage-"
TEMP_FILE_SUFFIX = ".tmp"
TEMP_FILE_PATTERN = re.compile(r"^\.storage-[a-z0-9_]{8}\.tmp$")


class FSStorageBackend(AbstractStorageBackend):
    """
    Filesystem-based storage backend.

    Stores every blob as an ordinary file at ``<baseDir>/<key>``. Keys may
    contain "/" separators which map to subdirectories; missing parent
    directories are created on write.

    Features:
    - Automatic directory creation if baseDir doesn't exist
    - Atomic replacement of existing blobs (write to temp file, then rename)
    - File permissions set to 0o644 (readable by all, writable by owner)
    - Keys are validated so they cannot escape baseDir

    Args:
        baseDir: Base directory path for storage (will be created if needed)

    Raises:
        StorageInitError: If baseDir cannot be created or is not a directory

    Example:
        >>> backend = FSStorageBackend("/tmp/storage")
        >>> backend.write("reports/1.json", b'{"x":1}')
        >>> backend.readBytes("reports/1.json")
        b'{"x":1}'
        >>> backend.exists("reports/1.json")
        True
    """

    def __init__(self, baseDir: str):
        self.baseDir = Path(os.path.abspath(baseDir))

        try:
            self.baseDir.mkdir(parents=True, exist_ok=True)
        except Exception as e:
            raise StorageInitError(
                f"Failed to create base directory '{baseDir}': {e}", originalError=e, operation="init"
            ) from e

        # Verify it's actually a directory
        if not self.baseDir.is_dir():
            raise StorageInitError(f"Base path '{baseDir}' exists but is not a directory", operation="init")

    def _getFilePath(self, key: str) -> Path:
        """
        Get the full file path for a key.

        Args:
            key: The storage key (will be validated)

        Returns:
            Path object for the file

        Raises:
            StorageKeyError: If the key is invalid
        """
        return self.baseDir.joinpath(*validateKey(key).split(KEY_SEPARATOR))

    def write(self, key: str, data: BlobData) -> None:
        """
        Store a blob to a file.

        Content is written to a temporary file in the target directory first,
        which then atomically replaces the target file.

        Args:
            key: The storage key (will be validated)
            data: Blob content as bytes or a readable binary stream

        Raises:
            StorageKeyError: If the key is invalid
            StorageWriteError: If the write operation fails
        """
        filePath = self._getFilePath(key)
        tempPath = None

        try:
            filePath.parent.mkdir(parents=True, exist_ok=True)

            fd, tempName = tempfile.mkstemp(dir=filePath.parent, prefix=TEMP_FILE_PREFIX, suffix=TEMP_FILE_SUFFIX)
            tempPath = Path(tempName)
            with os.fdopen(fd, "wb") as f:
                if isinstance(data, (bytes, bytearray, memoryview)):
                    f.write(data)
                else:
                    shutil.copyfileobj(data, f)

            os.chmod(tempPath, 0o644)
            tempPath.replace(filePath)

        except Exception as e:
            if tempPath is not None:
                try:
                    tempPath.unlink(missing_ok=True)
                except OSError:
                    pass  # Ignore cleanup errors

            raise StorageWriteError(
                f"Failed to store object with key '{key}': {e}", originalError=e, operation="write", key=key
            ) from e

    def read(self, key: str) -> BinaryIO:
        """
        Open the file stored under the key.

        Args:
            key: The storage key (will be validated)

        Returns:
            File object opened in binary mode, to be closed by the caller

        Raises:
            StorageKeyError: If the key is invalid
            StorageNotFoundError: If the file does not exist
            StorageReadError: If the file cannot be opened
        """
        filePath = self._getFilePath(key)

        try:
            return open(filePath, "rb")
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError) as e:
            raise StorageNotFoundError(key) from e
        except OSError as e:
            raise StorageReadError(
                f"Failed to read object with key '{key}': {e}", originalError=e, operation="read", key=key
            ) from e

    def exists(self, key: str) -> bool:
        """
        Check if a regular file exists for the specified key.

        Args:
            key: The storage key (will be validated)

        Returns:
            True if the file exists, False otherwise

        Raises:
            StorageKeyError: If the key is invalid
            StorageCheckError: If the file cannot be inspected
        """
        filePath = self._getFilePath(key)

        try:
            fileStat = os.stat(filePath)
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError as e:
            raise StorageCheckError(
                f"Failed to check existence of key '{key}': {e}", originalError=e, operation="exists", key=key
            ) from e

        return stat.S_ISREG(fileStat.st_mode)

    def list(self, prefix: str = "") -> list[str]:
        """
        List all stored keys starting with the prefix.

        Args:
            prefix: Optional prefix to filter keys (default: "" for all keys)

        Returns:
            Sorted list of keys ("/"-separated paths relative to baseDir).
            Returns empty list if no files match.

        Raises:
            StorageListError: If the directory tree cannot be walked
        """
        try:
            keys = []
            for path in self.baseDir.rglob("*"):
                if not path.is_file() or TEMP_FILE_PATTERN.match(path.name):
                    continue
                key = path.relative_to(self.baseDir).as_posix()
                if key.startswith(prefix):
                    keys.append(key)

            # Sort for consistent ordering
            keys.sort()
            return keys

        except OSError as e:
            raise StorageListError(
                f"Failed to list objects with prefix '{prefix}': {e}", originalError=e, operation="list", key=prefix
            ) from e
