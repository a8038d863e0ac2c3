"""
Input validation utilities for the Feedbin Importer.

This module provides validation functions for command-line arguments.
"""

import os
from pathlib import Path
from typing import Optional, Union


class ValidationError(Exception):
    """Custom exception for validation errors."""

    pass


def validate_input_file(file_path: Union[str, Path, None]) -> Path:
    """
    Validate that input file exists, is readable and looks like a CSV.

    Args:
        file_path: Path to the Pocket export

    Returns:
        Validated absolute Path

    Raises:
        ValidationError: If file doesn't exist or isn't readable
    """
    if not file_path:
        raise ValidationError("Input file is required (use --input/-i)")

    path = Path(file_path)

    if not path.exists():
        raise ValidationError(f"Input file does not exist: {file_path}")

    if not path.is_file():
        raise ValidationError(f"Input path is not a file: {file_path}")

    if not os.access(path, os.R_OK):
        raise ValidationError(f"Input file is not readable: {file_path}")

    if path.suffix.lower() != ".csv":
        raise ValidationError(f"Input file must be a CSV file, got: {path.suffix or 'no extension'}")

    return path.absolute()


def validate_config_file(file_path: Union[str, Path, None]) -> Optional[Path]:
    """
    Validate an optional configuration file path.

    Raises:
        ValidationError: If the file is given but missing or of the wrong type
    """
    if file_path is None:
        return None

    path = Path(file_path)

    if not path.exists():
        raise ValidationError(f"Configuration file does not exist: {file_path}")

    if path.suffix.lower() not in (".toml", ".json"):
        raise ValidationError(
            f"Configuration file must be .toml or .json, got: {path.suffix}"
        )

    return path.absolute()


def validate_delay(delay: Optional[float]) -> Optional[float]:
    """Validate the inter-item delay override."""
    if delay is None:
        return None
    if delay < 0 or delay > 10:
        raise ValidationError(f"Delay must be between 0 and 10 seconds, got: {delay}")
    return delay


def validate_timeout(timeout: Optional[int]) -> Optional[int]:
    """Validate the request timeout override."""
    if timeout is None:
        return None
    if timeout < 1 or timeout > 300:
        raise ValidationError(f"Timeout must be between 1 and 300 seconds, got: {timeout}")
    return timeout


def validate_limit(limit: Optional[int]) -> Optional[int]:
    """Validate the preview row limit."""
    if limit is None:
        return None
    if limit < 1:
        raise ValidationError(f"Row limit must be at least 1, got: {limit}")
    return limit
