"""
Pytest configuration and common fixtures for storage tests.

This module provides shared fixtures for testing storage backends,
the storage service and the CLI. All fixtures follow camelCase naming convention.
"""

from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from internal.services.storage.backends.s3 import S3StorageBackend
from internal.services.storage.service import StorageService
from tests.fixtures import FakeS3Client

# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def resetStorageServiceSingleton() -> Generator[None, None, None]:
    """Reset StorageService singleton before and after each test."""
    StorageService._instance = None
    yield
    StorageService._instance = None


# ============================================================================
# Backend Fixtures
# ============================================================================


@pytest.fixture
def storageDir(tmp_path: Path) -> Path:
    """
    Provide a not yet existing storage directory.

    Returns:
        Path: Directory path inside pytest's tmp_path
    """
    return tmp_path / "storage"


@pytest.fixture
def fakeS3Client() -> FakeS3Client:
    """
    Create an in-memory S3 client for bucket "artifacts".

    Returns:
        FakeS3Client: Client double with two keys per list page
    """
    return FakeS3Client(bucket="artifacts")


@pytest.fixture
def fakeS3Backend(fakeS3Client: FakeS3Client) -> S3StorageBackend:
    """
    Create S3StorageBackend on top of the in-memory client, prefix "builds".

    Returns:
        S3StorageBackend: Backend bound to bucket "artifacts"
    """
    with patch("internal.services.storage.backends.s3.boto3.client", return_value=fakeS3Client):
        return S3StorageBackend(bucket="artifacts", prefix="builds")
