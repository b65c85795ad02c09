"""
Configuration management for Firmirror storage.
"""

import logging
import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import tomli

import lib.utils as utils

logger = logging.getLogger(__name__)


def replaceMatchToEnv(match: re.Match[str]) -> str:
    """Replace environment variable placeholders with actual values.

    Args:
        match: A regex match object containing the environment variable name.

    Returns:
        str: The value of the environment variable or the original placeholder
             if the variable is not set.
    """
    key = match.group(1)
    return os.getenv(key, match.group(0))


def substituteEnvVars(value: Any) -> Any:
    """Recursively substitute environment variable placeholders in configuration values.

    This function processes strings, dictionaries, and lists to replace placeholders
    in the format ${VAR_NAME} with their corresponding environment variable values.

    Args:
        value: The configuration value to process. Can be a string, dict, list, or other type.

    Returns:
        The processed value with environment variables substituted.
    """
    if isinstance(value, str):
        return re.sub(r"\$\{([A-Za-z_][A-Za-z0-9_-]*)\}", replaceMatchToEnv, value)
    elif isinstance(value, dict):
        return {k: substituteEnvVars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substituteEnvVars(item) for item in value]
    return value


class ConfigManager:
    """Manages configuration loading for the storage tool."""

    def __init__(
        self, configPath: str = "config.toml", configDirs: Optional[List[str]] = None, dotEnvFile: str = ".env"
    ):
        """Initialize ConfigManager with config file path and optional config directories."""
        self.config_path = configPath
        self.config_dirs = configDirs or []
        if os.path.exists(dotEnvFile):
            utils.load_dotenv(path=dotEnvFile)
        self.config = substituteEnvVars(self._loadConfig())

    def _findTomlFilesRecursive(self, directory: str) -> List[Path]:
        """Recursively find all .toml files in a directory, dood!"""
        toml_files = []
        dir_path = Path(directory)

        if not dir_path.exists():
            logger.warning(f"Config directory {directory} does not exist, skipping, dood!")
            return toml_files

        if not dir_path.is_dir():
            logger.warning(f"Config path {directory} is not a directory, skipping, dood!")
            return toml_files

        try:
            for toml_file in dir_path.rglob("*.toml"):
                if toml_file.is_file():
                    toml_files.append(toml_file)
                    logger.debug(f"Found config file: {toml_file}")
        except OSError as e:
            logger.error(f"Error scanning directory {directory}: {e}")

        return sorted(toml_files)  # Sort for consistent ordering

    def _mergeConfigs(self, base_config: Dict[str, Any], new_config: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two configuration dictionaries, dood!"""
        merged = base_config.copy()

        for key, value in new_config.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._mergeConfigs(merged[key], value)
            else:
                merged[key] = value

        return merged

    def _loadConfig(self) -> Dict[str, Any]:
        """
        Load configuration from a TOML file and optional config directories.

        Files found in config directories are merged on top of the main file in
        sorted path order. A broken file inside a config directory is logged and
        skipped.

        Returns:
            Dict[str, Any]: The loaded and merged configuration dictionary.

        Raises:
            SystemExit: If the main configuration file is not found and no config
                directories are provided, or if the main file cannot be parsed.
        """
        config_file = Path(self.config_path)
        hasConfigFile = config_file.exists()
        if not hasConfigFile and not self.config_dirs:
            logger.error(f"Configuration file {self.config_path} not found!")
            sys.exit(1)

        config: Dict[str, Any] = {}
        if hasConfigFile:
            try:
                with open(config_file, "rb") as f:
                    config = tomli.load(f)
            except (OSError, tomli.TOMLDecodeError) as e:
                logger.error(f"Failed to load configuration: {e}")
                sys.exit(1)
            logger.info(f"Loaded main config from {self.config_path}")

        if self.config_dirs:
            logger.info(f"Scanning {len(self.config_dirs)} config directories for .toml files, dood!")

            for config_dir in self.config_dirs:
                toml_files = self._findTomlFilesRecursive(config_dir)
                logger.info(f"Found {len(toml_files)} .toml files in {config_dir}")

                for toml_file in toml_files:
                    try:
                        with open(toml_file, "rb") as f:
                            dir_config = tomli.load(f)
                    except (OSError, tomli.TOMLDecodeError) as e:
                        logger.error(f"Failed to load config file {toml_file}: {e}")
                        continue

                    config = self._mergeConfigs(config, dir_config)
                    logger.info(f"Merged config from {toml_file}")

        logger.info("Configuration loaded and merged successfully, dood!")
        return config

    def get(self, key: str, default=None) -> Any:
        """Get configuration value by key."""
        return self.config.get(key, default)

    def getLoggingConfig(self) -> Dict[str, Any]:
        """Get logging-specific configuration."""
        return self.get("logging", {})

    def getStorageConfig(self) -> Dict[str, Any]:
        """
        Get storage service configuration.

        Returns a dictionary containing storage backend configuration with the following structure:
        - type: Backend type ("fs" or "s3")
        - fs: Filesystem backend configuration (if type is "fs")
            - base-dir: Base directory path for storage
        - s3: S3 backend configuration (if type is "s3")
            - bucket: S3 bucket name
            - prefix: Optional namespace prefix for all keys
            - region: Optional region override
            - endpoint: Optional S3-compatible endpoint URL
            - key-id / key-secret: Optional static credentials
            - connect-timeout / read-timeout: Optional timeouts in seconds
            - max-attempts: Optional number of attempts per request

        Returns:
            Dict[str, Any]: Storage configuration dictionary with backend-specific settings.
                           Returns empty dict if storage section is not configured.

        Example return values:
            Filesystem backend:
            {
                "type": "fs",
                "fs": {"base-dir": "./storage/objects"}
            }

            S3 backend:
            {
                "type": "s3",
                "s3": {
                    "bucket": "artifacts",
                    "prefix": "builds",
                    "endpoint": "http://localhost:9000"
                }
            }
        """
        return self.get("storage", {})
