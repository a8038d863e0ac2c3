"""
Logging configuration for the Feedbin Importer.

This module sets up file and console logging for a CLI session.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .secure_logging import RedactingFilter


def setup_logging(
    verbose: bool = False,
    log_file: Optional[str] = None,
    console_output: bool = False,
) -> Path:
    """
    Set up logging configuration.

    Args:
        verbose: Log at DEBUG instead of INFO
        log_file: Optional log file name override
        console_output: Also log to stdout (the CLI draws its own output)

    Returns:
        Path of the log file in use
    """
    log_level = "DEBUG" if verbose else "INFO"

    if log_file is None:
        log_file = "feedbin_importer.log"

    log_dir = Path.cwd() / "logs"
    log_dir.mkdir(exist_ok=True)

    # Create timestamped log file
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_path = log_dir / f"{Path(log_file).stem}_{timestamp}.log"

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    redactor = RedactingFilter()
    handlers = []

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(log_format, date_format))
    file_handler.addFilter(redactor)
    handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(log_format, date_format))
        console_handler.addFilter(redactor)
        handlers.append(console_handler)

    logging.basicConfig(
        level=getattr(logging, log_level), handlers=handlers, force=True
    )

    logger = logging.getLogger(__name__)
    logger.info(f"Feedbin Importer starting - Log file: {log_path}")
    logger.info(f"Log level: {log_level}")

    # Reduce noise from HTTP libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    return log_path
