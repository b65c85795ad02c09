"""
Test fixtures package for storage tests.

This package organizes test fixtures into logical modules:
- service_mocks: Mock ConfigManager and an in-memory S3 client

All fixtures are also available through the main conftest.py file.
"""

from tests.fixtures.service_mocks import (
    FakeS3Client,
    createClientError,
    createMockConfigManager,
)

__all__ = [
    "FakeS3Client",
    "createClientError",
    "createMockConfigManager",
]
