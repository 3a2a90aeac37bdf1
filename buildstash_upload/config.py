"""Configuration management for the Buildstash upload client."""

import json
import os
import shutil
from pathlib import Path

from buildstash_upload.constants import (
    BYTES_PER_MB,
    DEFAULT_API_BASE_URL,
    PART_MAX_ATTEMPTS,
    PART_RETRY_BACKOFF_SECONDS,
)
from buildstash_upload.logging_config import get_logger
from buildstash_upload.retry import RetryPolicy

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / '.buildstash' / 'config.json'


class Config:
    """Manages client configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "api_base_url": DEFAULT_API_BASE_URL,
        "timeout": 30,
        "upload_timeout_base": 30.0,
        "upload_timeout_per_mb": 0.1,
        "part_max_attempts": PART_MAX_ATTEMPTS,
        "part_retry_backoff_seconds": PART_RETRY_BACKOFF_SECONDS,
    }

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.buildstash/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

        env_url = os.environ.get("BUILDSTASH_API_URL")
        if env_url:
            self.data['api_base_url'] = env_url

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            import tempfile
            self.config_path = Path(tempfile.gettempdir()) / '.buildstash' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                backup_path = self.config_path.with_suffix('.json.bak')
                logger.warning(f"Config file unreadable ({e}), backing up to {backup_path}")
                try:
                    shutil.copy(self.config_path, backup_path)
                except IOError as copy_error:
                    logger.warning(f"Could not back up config file: {copy_error}")
                    return self.DEFAULT_CONFIG.copy()
                return self._write_defaults()
        else:
            return self._write_defaults()

    def _write_defaults(self) -> dict:
        """Write the default configuration to the config path and return it."""
        config = self.DEFAULT_CONFIG.copy()
        try:
            with open(self.config_path, 'w') as f:
                json.dump(config, f, indent=2)
        except IOError as e:
            logger.debug(f"Could not write default config: {e}")
        return config

    def get_base_url(self) -> str:
        """
        Get registry API base URL.

        Returns:
            Base URL string (e.g., "https://app.buildstash.com/api/v1")
        """
        return str(self.data.get('api_base_url', DEFAULT_API_BASE_URL)).rstrip('/')

    def get_timeout(self) -> float:
        """
        Get registry request timeout in seconds.

        Returns:
            Timeout value in seconds
        """
        return self.data.get('timeout', 30)

    def get_upload_timeout(self, size_bytes: int) -> float:
        """
        Calculate timeout for a presigned write based on body size.

        Args:
            size_bytes: Body size in bytes

        Returns:
            Timeout in seconds (base + per-MB allowance)
        """
        base = float(self.data.get('upload_timeout_base', 30.0))
        per_mb = float(self.data.get('upload_timeout_per_mb', 0.1))
        return base + (size_bytes / BYTES_PER_MB) * per_mb

    def get_retry_policy(self) -> RetryPolicy:
        """
        Build the per-part retry policy.

        Returns:
            RetryPolicy with configured attempt budget and backoff
        """
        return RetryPolicy(
            max_attempts=int(self.data.get('part_max_attempts', PART_MAX_ATTEMPTS)),
            backoff_seconds=float(
                self.data.get('part_retry_backoff_seconds', PART_RETRY_BACKOFF_SECONDS)
            ),
        )
