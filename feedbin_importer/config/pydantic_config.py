"""
Pydantic-based configuration system for the Feedbin Importer.

Settings come from an optional TOML or JSON file and may be overridden
from the command line. Credentials are never part of the configuration.
"""

import json
import sys
import warnings
from pathlib import Path
from typing import Dict, List, Literal, Optional

import toml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)


from ..utils.error_handler import ConfigurationError

DEFAULT_BASE_URL = "https://api.feedbin.com"
DEFAULT_USER_AGENT = "FeedbinImporter/1.0"


class NetworkConfig(BaseModel):
    """Settings for talking to the Feedbin API."""

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Feedbin API root",
        json_schema_extra={
            "error_msg": "Base URL must start with https:// or http://."
        },
    )
    timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Request timeout in seconds",
        json_schema_extra={
            "error_msg": "Timeout must be between 1 and 300 seconds. "
            "Recommended: 30 seconds."
        },
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        min_length=1,
        description="User-Agent header sent with every request",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v):
        """Require an http(s) URL and drop any trailing slash."""
        if not v.startswith(("https://", "http://")):
            raise ValueError("base_url must start with https:// or http://")
        if v.startswith("http://"):
            warnings.warn(
                "Feedbin credentials will be sent over plain HTTP. "
                "Use https:// unless you are testing against a local server.",
                UserWarning,
            )
        return v.rstrip("/")


class ImportConfig(BaseModel):
    """Settings for the sequential import loop."""

    inter_item_delay: float = Field(
        default=0.5,
        ge=0.0,
        le=10.0,
        description="Pause in seconds after each successful item",
        json_schema_extra={
            "error_msg": "Delay must be between 0 and 10 seconds. "
            "Recommended: 0.5 seconds to stay polite to the API."
        },
    )
    mark_read_failure: Literal["fail", "warn"] = Field(
        default="fail",
        description="How a failed mark-as-read call affects the item",
        json_schema_extra={
            "error_msg": "mark_read_failure must be 'fail' or 'warn'."
        },
    )
    archive_statuses: List[str] = Field(
        default_factory=lambda: ["archive"],
        description="Pocket status labels that mean the bookmark was read",
    )

    @field_validator("inter_item_delay")
    @classmethod
    def validate_inter_item_delay(cls, v):
        """Warn when the delay is low enough to risk rate limiting."""
        if 0 < v < 0.2:
            warnings.warn(
                f"Short delay ({v}s) between items may trigger Feedbin "
                "rate limiting. Consider 0.5 seconds.",
                UserWarning,
            )
        return v

    @field_validator("archive_statuses")
    @classmethod
    def validate_archive_statuses(cls, v):
        cleaned = [s.strip().lower() for s in v if s and s.strip()]
        if not cleaned:
            raise ValueError("archive_statuses must name at least one status")
        return cleaned


class ImporterConfig(BaseModel):
    """Main configuration model."""

    model_config = ConfigDict(populate_by_name=True)

    network: NetworkConfig = Field(default_factory=NetworkConfig)
    import_: ImportConfig = Field(default_factory=ImportConfig, alias="import")


class ConfigurationManager:
    """Manages loading and validation of configuration from multiple sources."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to configuration file (TOML or JSON)
        """
        self._config: Optional[ImporterConfig] = None
        self._load_configuration(config_path)

    def _get_default_config_paths(self) -> List[Path]:
        """Get list of default configuration file paths to try."""
        if getattr(sys, "frozen", False):
            app_dir = Path(sys.executable).parent
        else:
            app_dir = Path.cwd()

        return [
            app_dir / "feedbin_importer.toml",
            app_dir / "feedbin_importer.json",
            Path.home() / ".config" / "feedbin-importer" / "config.toml",
        ]

    def _load_configuration(self, config_path: Optional[Path] = None) -> None:
        """Load configuration from file or use defaults."""
        config_data = {}

        if config_path:
            config_data = self._load_config_file(Path(config_path))
        else:
            for path in self._get_default_config_paths():
                if path.exists():
                    config_data = self._load_config_file(path)
                    break

        self._reject_credentials(config_data)

        try:
            self._config = ImporterConfig(**config_data)
        except ValidationError as e:
            raise ConfigurationError(format_config_error(e)) from e

    def _load_config_file(self, config_path: Path) -> Dict:
        """Load configuration from TOML or JSON file."""
        if not config_path.exists():
            raise FileNotFoundError(
                2, "Configuration file not found", str(config_path)
            )

        suffix = config_path.suffix.lower()
        if suffix not in (".toml", ".json"):
            raise ConfigurationError(
                f"Unsupported configuration file format: {config_path.suffix}"
            )

        try:
            if suffix == ".toml":
                return toml.load(config_path)
            with open(config_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (toml.TomlDecodeError, json.JSONDecodeError, OSError) as e:
            raise ConfigurationError(
                f"Failed to load configuration from {config_path}: {e}"
            ) from e

    @staticmethod
    def _reject_credentials(config_data: Dict) -> None:
        """Credentials live in memory only; refuse them in files."""
        for section in config_data.values():
            if isinstance(section, dict) and (
                "password" in section or "secret" in section
            ):
                raise ConfigurationError(
                    "Configuration files must not contain Feedbin passwords. "
                    "Use the interactive prompt or FEEDBIN_PASSWORD instead."
                )

    def update_from_cli_args(self, args: Dict) -> None:
        """Update configuration from command-line arguments."""
        if not self._config:
            raise RuntimeError("Configuration not loaded")

        config_dict = self._config.model_dump(by_alias=True)

        if args.get("timeout") is not None:
            config_dict["network"]["timeout"] = args["timeout"]

        if args.get("base_url"):
            config_dict["network"]["base_url"] = args["base_url"]

        if args.get("delay") is not None:
            config_dict["import"]["inter_item_delay"] = args["delay"]

        if args.get("mark_read_failure"):
            config_dict["import"]["mark_read_failure"] = args["mark_read_failure"]

        try:
            self._config = ImporterConfig(**config_dict)
        except ValidationError as e:
            raise ConfigurationError(format_config_error(e)) from e

    @property
    def config(self) -> ImporterConfig:
        """Get the current configuration."""
        if not self._config:
            raise RuntimeError("Configuration not loaded")
        return self._config

    @staticmethod
    def create_sample_config(output_path: Path, format: str = "toml") -> None:
        """Create a sample configuration file."""
        sample_config = {
            "network": {
                "base_url": DEFAULT_BASE_URL,
                "timeout": 30,
                "user_agent": DEFAULT_USER_AGENT,
            },
            "import": {
                "inter_item_delay": 0.5,
                "mark_read_failure": "fail",
                "archive_statuses": ["archive"],
            },
        }

        if format.lower() == "toml":
            with open(output_path, "w", encoding="utf-8") as f:
                toml.dump(sample_config, f)
        elif format.lower() == "json":
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(sample_config, f, indent=2)
        else:
            raise ConfigurationError(f"Unsupported format: {format}")


class ConfigurationErrorFormatter:
    """Formats Pydantic validation errors into user-friendly messages."""

    @staticmethod
    def format_validation_error(error: ValidationError) -> str:
        """
        Convert Pydantic ValidationError into a user-friendly error message.

        Args:
            error: Pydantic ValidationError instance

        Returns:
            Formatted error message with helpful guidance
        """
        error_messages = []

        for error_detail in error.errors():
            location = ConfigurationErrorFormatter._format_error_location(
                error_detail["loc"]
            )
            error_messages.append(
                ConfigurationErrorFormatter._format_by_error_type(
                    location,
                    error_detail["type"],
                    error_detail,
                    error_detail.get("input", "N/A"),
                )
            )

        header = "Configuration Validation Failed:\n"
        separator = "-" * 60 + "\n"
        footer = (
            "\n\nTips:\n"
            "- Check the configuration file format (TOML or JSON)\n"
            "- Ensure numeric values are within the allowed ranges\n"
            "- Use 'feedbin-importer --create-config' to generate a sample file"
        )

        return header + separator + "\n".join(error_messages) + footer

    @staticmethod
    def _format_error_location(location: tuple) -> str:
        """Format the error location path."""
        if not location:
            return "Configuration"

        path_parts = []
        for part in location:
            if isinstance(part, str):
                path_parts.append(part)
            else:
                path_parts.append(f"[{part}]")

        return " -> ".join(path_parts)

    @staticmethod
    def _format_by_error_type(
        location: str, error_type: str, error_detail: dict, input_value
    ) -> str:
        """Format error message based on Pydantic error type."""
        ctx = error_detail.get("ctx", {})

        if error_type == "missing":
            return f"x {location}: Required field is missing"

        elif error_type in (
            "greater_than_equal",
            "less_than_equal",
            "greater_than",
            "less_than",
        ):
            limit = next(iter(ctx.values()), "limit")
            operator = {
                "greater_than_equal": ">=",
                "less_than_equal": "<=",
                "greater_than": ">",
                "less_than": "<",
            }[error_type]
            return f"x {location}: Value must be {operator} {limit} (got: {input_value})"

        elif error_type == "literal_error":
            expected = ctx.get("expected", "valid option")
            return f"x {location}: Must be one of {expected} (got: {input_value})"

        else:
            msg = error_detail.get("msg", "Invalid configuration value")
            return f"x {location}: {msg} (got: {input_value})"


def format_config_error(error: Exception) -> str:
    """
    Format any configuration-related error into a user-friendly message.

    Args:
        error: Exception that occurred during configuration

    Returns:
        Formatted error message
    """
    if isinstance(error, ValidationError):
        return ConfigurationErrorFormatter.format_validation_error(error)

    elif isinstance(error, FileNotFoundError):
        return (
            f"Configuration File Not Found: {error.filename}\n"
            "- Create one with: feedbin-importer --create-config\n"
            "- Or omit --config to use defaults"
        )

    return f"Configuration Error: {error}"
