"""
Tests for storage key validation and namespace prefix handling, dood!
"""

import pytest

from internal.services.storage.exceptions import StorageKeyError
from internal.services.storage.utils import (
    MAX_KEY_LENGTH,
    composeKey,
    decomposeKey,
    normalizePrefix,
    validateKey,
)


class TestValidateKey:
    """Test validateKey, dood!"""

    @pytest.mark.parametrize(
        "key",
        ["report.json", "42/log.txt", "a/b/c/d.bin", ".config", "file..name", "with space.txt", "a" * MAX_KEY_LENGTH],
    )
    def testValidKeysAreReturnedUnchanged(self, key):
        """Test that valid keys pass through"""
        assert validateKey(key) == key

    @pytest.mark.parametrize("key", ["", "   ", "\t"])
    def testEmptyKeysRejected(self, key):
        """Test empty and whitespace-only keys"""
        with pytest.raises(StorageKeyError, match="empty"):
            validateKey(key)

    def testTooLongKeyRejected(self):
        """Test key length limit"""
        with pytest.raises(StorageKeyError, match="maximum length"):
            validateKey("a" * (MAX_KEY_LENGTH + 1))

    @pytest.mark.parametrize("key", ["file\x00name", "line\nbreak", "del\x7f"])
    def testControlCharactersRejected(self, key):
        """Test null bytes and control characters"""
        with pytest.raises(StorageKeyError, match="control characters"):
            validateKey(key)

    def testBackslashRejected(self):
        """Test Windows-style separators"""
        with pytest.raises(StorageKeyError, match="backslashes"):
            validateKey("..\\..\\windows")

    def testAbsoluteKeyRejected(self):
        """Test absolute keys"""
        with pytest.raises(StorageKeyError, match="relative"):
            validateKey("/etc/passwd")

    @pytest.mark.parametrize("key", ["a//b", "dir/", "a/"])
    def testEmptySegmentsRejected(self, key):
        """Test doubled and trailing separators"""
        with pytest.raises(StorageKeyError, match="empty segments"):
            validateKey(key)

    @pytest.mark.parametrize("key", ["..", "../x", "a/../../x", "a/./b", "."])
    def testTraversalRejected(self, key):
        """Test dot segments"""
        with pytest.raises(StorageKeyError, match="segments"):
            validateKey(key)


class TestNamespacePrefix:
    """Test composeKey/decomposeKey/normalizePrefix, dood!"""

    def testComposeWithPrefix(self):
        """Test prefix joined with a single separator"""
        assert composeKey("builds", "42/log.txt") == "builds/42/log.txt"

    def testComposeWithoutPrefix(self):
        """Test no prefix leaves key unchanged"""
        assert composeKey("", "42/log.txt") == "42/log.txt"

    def testComposeEmptyKeyGivesListingPrefix(self):
        """Test listing everything under a namespace"""
        assert composeKey("ns", "") == "ns/"

    def testDecomposeWithPrefix(self):
        """Test prefix and separator are stripped"""
        assert decomposeKey("builds", "builds/42/log.txt") == "42/log.txt"

    def testDecomposeWithoutPrefix(self):
        """Test raw key returned when no prefix configured"""
        assert decomposeKey("", "builds/42/log.txt") == "builds/42/log.txt"

    def testDecomposeShortKeyUnchanged(self):
        """Test keys shorter than prefix plus separator are returned as is"""
        assert decomposeKey("builds", "build") == "build"

    def testDecomposeExactPrefixGivesEmptyKey(self):
        """Test the namespace marker object itself decomposes to empty key"""
        assert decomposeKey("ns", "ns/") == ""

    @pytest.mark.parametrize("prefix", ["", "ns", "deep/name/space"])
    @pytest.mark.parametrize("key", ["a", "a/1", "x/y/z.bin"])
    def testComposeDecomposeAreInverse(self, prefix, key):
        """Test decomposeKey(composeKey(k)) == k"""
        assert decomposeKey(prefix, composeKey(prefix, key)) == key

    @pytest.mark.parametrize(
        "prefix,expected", [(None, ""), ("", ""), ("builds", "builds"), ("builds/", "builds"), ("a/b//", "a/b")]
    )
    def testNormalizePrefix(self, prefix, expected):
        """Test trailing separators are removed"""
        assert normalizePrefix(prefix) == expected
