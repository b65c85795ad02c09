"""
S3 storage backend implementation

This module provides a storage backend for AWS S3 and S3-compatible storage services.
Uses boto3 library for S3 operations with proper error handling.
"""

import io
import logging
from typing import Any, BinaryIO, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from ..exceptions import (
    StorageCheckError,
    StorageInitError,
    StorageListError,
    StorageNotFoundError,
    StorageReadError,
    StorageWriteError,
)
from ..utils import KEY_SEPARATOR, composeKey, decomposeKey, normalizePrefix, validateKey
from .abstract import AbstractStorageBackend, BlobData

logger = logging.getLogger(__name__)

# Error codes S3 and S3-compatible stores use for a missing object
NOT_FOUND_ERROR_CODES = frozenset({"NoSuchKey", "NotFound", "404"})


def _isNotFoundError(error: Exception) -> bool:
    """
    Check whether a boto3 error means "object does not exist".

    GetObject reports a missing key as NoSuchKey, HeadObject (which has no
    response body) as a bare 404. The HTTP status alone counts only when the
    store sent no symbolic error code (NoSuchBucket is a failure, not absence).
    """
    if not isinstance(error, ClientError):
        return False

    errorCode = str(error.response.get("Error", {}).get("Code", ""))
    if errorCode in NOT_FOUND_ERROR_CODES:
        return True
    if errorCode and not errorCode.isdigit():
        return False

    return error.response.get("ResponseMetadata", {}).get("HTTPStatusCode") == 404


class S3StorageBackend(AbstractStorageBackend):
    """
    S3-based storage backend using boto3.

    Stores objects in AWS S3 or S3-compatible storage services (e.g., MinIO,
    Yandex Object Storage). Every key is optionally placed under a namespace
    prefix, so several logical stores can share one bucket.

    Features:
    - Ambient credentials/region (boto3 default chain) with optional overrides
    - Custom endpoints with path-style addressing for S3-compatible services
    - Connect/read timeouts and retry attempts passed to botocore
    - Bucket reachability verified on construction
    - Missing objects reported as StorageNotFoundError / False

    Blobs are fully held in memory on both write and read, so memory use
    grows with blob size times the number of concurrent operations.

    Deadlines are per backend, not per call: connectTimeout and readTimeout
    bound every socket operation and maxAttempts bounds retries, so each
    request fails with a Storage*Error once they are exhausted. Calls cannot
    be cancelled from another thread.

    Args:
        bucket: S3 bucket name (required)
        prefix: Optional namespace prefix for all keys (default: "")
        region: Optional region override (e.g. "us-east-1")
        endpoint: Optional custom endpoint URL (e.g. "http://localhost:9000")
        keyId: Optional access key ID, ambient credentials are used otherwise
        keySecret: Optional secret access key
        connectTimeout: Optional connect timeout in seconds
        readTimeout: Optional read timeout in seconds
        maxAttempts: Optional total number of attempts per request

    Raises:
        StorageInitError: If bucket is empty, the client cannot be created
            or the bucket is not reachable

    Example:
        >>> backend = S3StorageBackend(bucket="artifacts", prefix="builds")
        >>> backend.write("42/log.txt", b"data")  # stored as "builds/42/log.txt"
        >>> backend.list("42/")
        ['42/log.txt']
    """

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        region: Optional[str] = None,
        endpoint: Optional[str] = None,
        keyId: Optional[str] = None,
        keySecret: Optional[str] = None,
        connectTimeout: Optional[float] = None,
        readTimeout: Optional[float] = None,
        maxAttempts: Optional[int] = None,
    ):
        if not bucket:
            raise StorageInitError("S3 bucket name is required", operation="init")

        self.bucket = bucket
        self.prefix = normalizePrefix(prefix)
        self.endpoint = endpoint

        try:
            self.client = boto3.client(
                "s3",
                endpoint_url=endpoint or None,
                region_name=region or None,
                aws_access_key_id=keyId or None,
                aws_secret_access_key=keySecret or None,
                config=self._buildConfig(endpoint, connectTimeout, readTimeout, maxAttempts),
            )
        except Exception as e:
            raise StorageInitError(f"Failed to initialize S3 client: {e}", originalError=e, operation="init") from e

        # Verify bucket exists and is accessible
        try:
            self.client.head_bucket(Bucket=self.bucket)
        except Exception as e:
            raise StorageInitError(
                f"Failed to access bucket '{self.bucket}': {e}", originalError=e, operation="init"
            ) from e

        logger.debug(f"S3 bucket '{self.bucket}' is reachable (endpoint: {endpoint or 'default'}), dood!")

    @staticmethod
    def _buildConfig(
        endpoint: Optional[str],
        connectTimeout: Optional[float],
        readTimeout: Optional[float],
        maxAttempts: Optional[int],
    ) -> Config:
        """
        Build botocore client configuration.

        Args:
            endpoint: Custom endpoint URL, switches to path-style addressing
            connectTimeout: Connect timeout in seconds
            readTimeout: Read timeout in seconds
            maxAttempts: Total number of attempts per request

        Returns:
            botocore Config object
        """
        configParams: dict[str, Any] = {}

        if endpoint:
            # Path-style URLs, checksums only where the operation requires them
            configParams["s3"] = {"addressing_style": "path"}
            configParams["request_checksum_calculation"] = "when_required"
            configParams["response_checksum_validation"] = "when_required"

        if connectTimeout is not None:
            configParams["connect_timeout"] = connectTimeout

        if readTimeout is not None:
            configParams["read_timeout"] = readTimeout

        if maxAttempts is not None:
            configParams["retries"] = {"max_attempts": maxAttempts, "mode": "standard"}

        return Config(**configParams)

    def _getS3Key(self, key: str) -> str:
        """
        Get the full S3 key with prefix.

        Args:
            key: The storage key (will be validated)

        Returns:
            The full S3 key with prefix

        Raises:
            StorageKeyError: If the key is invalid
        """
        return composeKey(self.prefix, validateKey(key))

    def write(self, key: str, data: BlobData) -> None:
        """
        Upload a blob to S3.

        Stream content is read into memory first, so the object size is known
        up front and the request body can be replayed on retries.

        Args:
            key: The storage key (will be validated and prefixed)
            data: Blob content as bytes or a readable binary stream

        Raises:
            StorageKeyError: If the key is invalid
            StorageWriteError: If reading the source or uploading fails
        """
        s3Key = self._getS3Key(key)

        try:
            body = bytes(data) if isinstance(data, (bytes, bytearray, memoryview)) else data.read()

            self.client.put_object(
                Bucket=self.bucket,
                Key=s3Key,
                Body=body,
                ContentType="application/octet-stream",
            )
        except Exception as e:
            raise StorageWriteError(
                f"Failed to store object with key '{key}' to S3: {e}", originalError=e, operation="write", key=key
            ) from e

    def read(self, key: str) -> BinaryIO:
        """
        Download a blob from S3.

        Args:
            key: The storage key (will be validated and prefixed)

        Returns:
            In-memory stream over the whole object

        Raises:
            StorageKeyError: If the key is invalid
            StorageNotFoundError: If the object does not exist
            StorageReadError: If the download fails
        """
        s3Key = self._getS3Key(key)

        try:
            response = self.client.get_object(Bucket=self.bucket, Key=s3Key)
            body = response["Body"]
            try:
                data = body.read()
            finally:
                body.close()
        except Exception as e:
            if _isNotFoundError(e):
                raise StorageNotFoundError(key) from e
            raise StorageReadError(
                f"Failed to get object with key '{key}' from S3: {e}", originalError=e, operation="read", key=key
            ) from e

        return io.BytesIO(data)

    def exists(self, key: str) -> bool:
        """
        Check if an object exists in S3.

        Args:
            key: The storage key (will be validated and prefixed)

        Returns:
            True if the object exists, False if not found

        Raises:
            StorageKeyError: If the key is invalid
            StorageCheckError: If the existence check fails
        """
        s3Key = self._getS3Key(key)

        try:
            self.client.head_object(Bucket=self.bucket, Key=s3Key)
            return True
        except Exception as e:
            if _isNotFoundError(e):
                return False
            raise StorageCheckError(
                f"Failed to check existence of key '{key}' in S3: {e}", originalError=e, operation="exists", key=key
            ) from e

    def list(self, prefix: str = "") -> list[str]:
        """
        List objects in S3 matching the prefix.

        All result pages are fetched before returning.

        Args:
            prefix: Optional prefix to filter keys (combined with backend prefix)

        Returns:
            List of unique keys matching the prefix, without the backend prefix.
            Returns empty list if no objects match.

        Raises:
            StorageListError: If any page request fails
        """
        fullPrefix = composeKey(self.prefix, prefix)

        try:
            paginator = self.client.get_paginator("list_objects_v2")

            keys: list[str] = []
            seenKeys: set[str] = set()
            for page in paginator.paginate(Bucket=self.bucket, Prefix=fullPrefix):
                for obj in page.get("Contents", []):
                    key = decomposeKey(self.prefix, obj["Key"])
                    # Skip "directory" placeholder objects
                    if not key or key.endswith(KEY_SEPARATOR) or key in seenKeys:
                        continue
                    seenKeys.add(key)
                    keys.append(key)

            return keys

        except Exception as e:
            raise StorageListError(
                f"Failed to list objects with prefix '{prefix}' in S3: {e}",
                originalError=e,
                operation="list",
                key=prefix,
            ) from e
