"""
Storage service utility functions

This module provides key validation (to prevent path traversal out of the
storage root) and the namespace prefix policy used by remote backends.
"""

from .exceptions import StorageKeyError

# Maximum allowed key length
MAX_KEY_LENGTH = 1024

# Separator between key segments and between namespace prefix and key
KEY_SEPARATOR = "/"


def validateKey(key: str) -> str:
    """
    Validate a storage key and return it unchanged.

    Keys are "/"-separated paths relative to the storage root. Validation
    rejects everything that could resolve outside of that root or that
    different backends would treat differently:
    1. Empty keys or keys of only whitespace
    2. Keys longer than MAX_KEY_LENGTH characters
    3. Null bytes and control characters (ASCII 0-31 and 127)
    4. Backslashes
    5. Absolute keys (leading "/")
    6. Empty segments ("a//b", trailing "/")
    7. "." and ".." segments

    Args:
        key: The storage key to validate

    Returns:
        The key itself

    Raises:
        StorageKeyError: If the key is invalid

    Examples:
        >>> validateKey("42/log.txt")
        '42/log.txt'
        >>> validateKey("../../etc/passwd")
        Traceback (most recent call last):
        ...
        StorageKeyError: Storage key must not contain '.' or '..' segments: '../../etc/passwd'
    """
    if not key or not key.strip():
        raise StorageKeyError("Storage key cannot be empty or only whitespace")

    if len(key) > MAX_KEY_LENGTH:
        raise StorageKeyError(f"Storage key exceeds maximum length of {MAX_KEY_LENGTH} characters. Length: {len(key)}")

    if any(ord(char) <= 31 or ord(char) == 127 for char in key):
        raise StorageKeyError(f"Storage key must not contain control characters: {key!r}")

    if "\\" in key:
        raise StorageKeyError(f"Storage key must not contain backslashes: '{key}'")

    if key.startswith(KEY_SEPARATOR):
        raise StorageKeyError(f"Storage key must be relative: '{key}'")

    segments = key.split(KEY_SEPARATOR)
    if any(segment == "" for segment in segments):
        raise StorageKeyError(f"Storage key must not contain empty segments: '{key}'")

    if any(segment in (".", "..") for segment in segments):
        raise StorageKeyError(f"Storage key must not contain '.' or '..' segments: '{key}'")

    return key


def normalizePrefix(prefix: str | None) -> str:
    """Strip trailing separators from a namespace prefix ("builds/" -> "builds")."""
    if not prefix:
        return ""
    return prefix.rstrip(KEY_SEPARATOR)


def composeKey(prefix: str, key: str) -> str:
    """
    Join a namespace prefix and a logical key into a full storage key.

    Args:
        prefix: Normalized namespace prefix, "" for none
        key: Logical key (or key prefix when listing)

    Returns:
        "prefix/key" when prefix is set, else key
    """
    if prefix:
        return f"{prefix}{KEY_SEPARATOR}{key}"
    return key


def decomposeKey(prefix: str, fullKey: str) -> str:
    """
    Strip the namespace prefix from a full storage key.

    Inverse of composeKey(): the first len(prefix) + 1 characters are removed
    when a prefix is configured and fullKey is at least that long, otherwise
    fullKey is returned unchanged.

    Args:
        prefix: Normalized namespace prefix, "" for none
        fullKey: Storage key as reported by the backend

    Returns:
        The logical key
    """
    prefixLen = len(prefix) + len(KEY_SEPARATOR)
    if prefix and len(fullKey) >= prefixLen:
        return fullKey[prefixLen:]
    return fullKey
