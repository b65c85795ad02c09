"""
Firmirror storage - command line access to the configured blob storage.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import shutil
import sys
from typing import List, Optional

from internal.config.manager import ConfigManager
from internal.services.storage import StorageError, StorageNotFoundError, StorageService
from lib.logging_utils import initLogging

# Configure basic logging first
logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO)
logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_STORAGE_ERROR = 2


class StorageCli:
    """Runs a single storage command against the configured backend."""

    def __init__(self, configPath: str = "config.toml", configDirs: Optional[List[str]] = None):
        self.configManager = ConfigManager(configPath, configDirs)
        initLogging(self.configManager.getLoggingConfig())

        self.storage = StorageService.getInstance()
        self.storage.injectConfig(self.configManager)

    def write(self, key: str, source: str) -> int:
        if source == "-":
            self.storage.write(key, sys.stdin.buffer)
        else:
            with open(source, "rb") as f:
                self.storage.write(key, f)
        logger.info(f"Stored {key}")
        return EXIT_OK

    def read(self, key: str, output: str) -> int:
        try:
            stream = self.storage.read(key)
        except StorageNotFoundError:
            print(f"Key not found: {key}", file=sys.stderr)
            return EXIT_NOT_FOUND

        with stream:
            if output == "-":
                shutil.copyfileobj(stream, sys.stdout.buffer)
                sys.stdout.buffer.flush()
            else:
                with open(output, "wb") as f:
                    shutil.copyfileobj(stream, f)
        return EXIT_OK

    def exists(self, key: str) -> int:
        exists = self.storage.exists(key)
        print("true" if exists else "false")
        return EXIT_OK if exists else EXIT_NOT_FOUND

    def list(self, prefix: str) -> int:
        for key in self.storage.list(prefix):
            print(key)
        return EXIT_OK


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Firmirror storage - write, read and list stored blobs, dood!")
    parser.add_argument(
        "-c",
        "--config",
        default="config.toml",
        help="Path to configuration file (default: config.toml)",
    )
    parser.add_argument(
        "--config-dir",
        action="append",
        help="Directory to search for .toml config files recursively (repeatable), dood!",
    )
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Pretty-print loaded configuration and exit, dood!",
    )

    subparsers = parser.add_subparsers(dest="command")

    writeParser = subparsers.add_parser("write", help="Store a file (or stdin) under KEY")
    writeParser.add_argument("key")
    writeParser.add_argument("source", nargs="?", default="-", help="Source file, '-' for stdin (default)")

    readParser = subparsers.add_parser("read", help="Print the blob stored under KEY")
    readParser.add_argument("key")
    readParser.add_argument("-o", "--output", default="-", help="Output file, '-' for stdout (default)")

    existsParser = subparsers.add_parser("exists", help="Check whether KEY is stored")
    existsParser.add_argument("key")

    listParser = subparsers.add_parser("list", help="List stored keys starting with PREFIX")
    listParser.add_argument("prefix", nargs="?", default="")

    args = parser.parse_args(argv)
    if not args.print_config and args.command is None:
        parser.error("a command is required")

    args.config = os.path.abspath(args.config)
    if args.config_dir:
        args.config_dir = [os.path.abspath(dir_path) for dir_path in args.config_dir]

    return args


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)

    if args.print_config:
        configManager = ConfigManager(args.config, args.config_dir)
        print(json.dumps(configManager.config, indent=2, ensure_ascii=False, default=str))
        return EXIT_OK

    try:
        cli = StorageCli(args.config, args.config_dir)
        match args.command:
            case "write":
                return cli.write(args.key, args.source)
            case "read":
                return cli.read(args.key, args.output)
            case "exists":
                return cli.exists(args.key)
            case "list":
                return cli.list(args.prefix)
            case _:
                raise ValueError(f"Unknown command: {args.command}")
    except StorageError as e:
        logger.error(f"Storage operation failed: {e}")
        return EXIT_STORAGE_ERROR
    except OSError as e:
        logger.error(f"Local file operation failed: {e}")
        return EXIT_STORAGE_ERROR


if __name__ == "__main__":
    sys.exit(main())
