"""
Configuration access for the Feedbin Importer.

Wraps the Pydantic-based ConfigurationManager with the accessors the
CLI and the import session need.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .pydantic_config import ConfigurationManager, ImporterConfig


class Configuration:
    """Configuration facade over the Pydantic models."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to user configuration file (TOML/JSON)
        """
        self._manager = ConfigurationManager(config_path)
        self._config = self._manager.config

    @property
    def config(self) -> ImporterConfig:
        """Get the underlying Pydantic configuration."""
        return self._config

    def update_from_args(self, args: Dict[str, Any]) -> None:
        """
        Update configuration from command-line arguments.

        Args:
            args: Dictionary of validated arguments
        """
        self._manager.update_from_cli_args(args)
        self._config = self._manager.config

    @property
    def base_url(self) -> str:
        return self._config.network.base_url

    @property
    def timeout(self) -> int:
        return self._config.network.timeout

    @property
    def user_agent(self) -> str:
        return self._config.network.user_agent

    @property
    def inter_item_delay(self) -> float:
        return self._config.import_.inter_item_delay

    @property
    def mark_read_failure(self) -> str:
        return self._config.import_.mark_read_failure

    @property
    def archive_statuses(self) -> Tuple[str, ...]:
        return tuple(self._config.import_.archive_statuses)

    def create_sample_config(self, output_path: Path, format: str = "toml") -> None:
        """Write a sample configuration file."""
        self._manager.create_sample_config(output_path, format)
