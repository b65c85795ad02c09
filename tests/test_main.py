"""
Tests for the command line entry point.
"""

import io
import sys
from unittest.mock import patch

import pytest

import main
from internal.services.storage.exceptions import StorageWriteError


@pytest.fixture(autouse=True)
def skipLoggingSetup():
    """Keep pytest's logging handlers in place."""
    with patch("main.initLogging"):
        yield


@pytest.fixture
def configPath(tmp_path, storageDir):
    """Create config file pointing to a filesystem storage."""
    path = tmp_path / "config.toml"
    path.write_text(f'[storage]\ntype = "fs"\n\n[storage.fs]\nbase-dir = "{storageDir.as_posix()}"\n')
    return str(path)


class TestCliCommands:
    """Test CLI subcommands against filesystem storage."""

    def testWriteFromFileAndRead(self, configPath, tmp_path, storageDir, capsysbinary):
        """Test write from file followed by read to stdout"""
        source = tmp_path / "source.bin"
        source.write_bytes(b"\x00binary\xff")

        assert main.main(["-c", configPath, "write", "42/log.txt", str(source)]) == main.EXIT_OK
        assert (storageDir / "42" / "log.txt").read_bytes() == b"\x00binary\xff"

        main.StorageService._instance = None
        capsysbinary.readouterr()
        assert main.main(["-c", configPath, "read", "42/log.txt"]) == main.EXIT_OK
        assert capsysbinary.readouterr().out == b"\x00binary\xff"

    def testWriteFromStdin(self, configPath, storageDir, monkeypatch):
        """Test write reading the blob from stdin"""
        monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"from stdin")))

        assert main.main(["-c", configPath, "write", "stdin.txt"]) == main.EXIT_OK
        assert (storageDir / "stdin.txt").read_bytes() == b"from stdin"

    def testReadToFile(self, configPath, tmp_path, storageDir):
        """Test read into an output file"""
        storageDir.mkdir(parents=True)
        (storageDir / "report.json").write_bytes(b'{"x":1}')
        output = tmp_path / "out.json"

        assert main.main(["-c", configPath, "read", "report.json", "-o", str(output)]) == main.EXIT_OK
        assert output.read_bytes() == b'{"x":1}'

    def testReadMissingKey(self, configPath, capsys):
        """Test read of a missing key exits with not found status"""
        assert main.main(["-c", configPath, "read", "missing"]) == main.EXIT_NOT_FOUND
        assert "Key not found: missing" in capsys.readouterr().err

    def testExists(self, configPath, storageDir, capsys):
        """Test exists output and exit status"""
        storageDir.mkdir(parents=True)
        (storageDir / "present").write_bytes(b"1")

        assert main.main(["-c", configPath, "exists", "present"]) == main.EXIT_OK
        assert capsys.readouterr().out.strip() == "true"

        main.StorageService._instance = None
        assert main.main(["-c", configPath, "exists", "absent"]) == main.EXIT_NOT_FOUND
        assert capsys.readouterr().out.strip() == "false"

    def testList(self, configPath, storageDir, capsys):
        """Test list prints one key per line"""
        (storageDir / "a").mkdir(parents=True)
        (storageDir / "a" / "1").write_bytes(b"1")
        (storageDir / "a" / "2").write_bytes(b"2")
        (storageDir / "b").write_bytes(b"3")

        assert main.main(["-c", configPath, "list", "a/"]) == main.EXIT_OK
        assert capsys.readouterr().out.splitlines() == ["a/1", "a/2"]

    def testInvalidKeyIsStorageError(self, configPath):
        """Test invalid key exits with storage error status"""
        assert main.main(["-c", configPath, "exists", "../etc/passwd"]) == main.EXIT_STORAGE_ERROR

    def testBackendErrorIsStorageError(self, configPath, tmp_path):
        """Test backend failure exits with storage error status"""
        source = tmp_path / "source.bin"
        source.write_bytes(b"data")

        with patch("main.StorageService.write", side_effect=StorageWriteError("boom")):
            assert main.main(["-c", configPath, "write", "key", str(source)]) == main.EXIT_STORAGE_ERROR

    def testMissingSourceFile(self, configPath, tmp_path):
        """Test unreadable source file exits with storage error status"""
        assert (
            main.main(["-c", configPath, "write", "key", str(tmp_path / "missing.bin")]) == main.EXIT_STORAGE_ERROR
        )


class TestCliArguments:
    """Test argument parsing."""

    def testPrintConfig(self, configPath, capsys):
        """Test --print-config prints merged configuration as JSON"""
        assert main.main(["-c", configPath, "--print-config"]) == main.EXIT_OK
        assert '"type": "fs"' in capsys.readouterr().out

    def testCommandRequired(self, configPath):
        """Test missing command is a usage error"""
        with pytest.raises(SystemExit) as excInfo:
            main.parse_arguments(["-c", configPath])

        assert excInfo.value.code == 2

    def testPathsMadeAbsolute(self, tmp_path, monkeypatch):
        """Test config paths are resolved against the current directory"""
        monkeypatch.chdir(tmp_path)

        args = main.parse_arguments(["-c", "config.toml", "--config-dir", "conf.d", "list"])

        assert args.config == str(tmp_path / "config.toml")
        assert args.config_dir == [str(tmp_path / "conf.d")]
        assert args.prefix == ""
