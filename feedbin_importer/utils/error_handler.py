"""
Error Handling for the Feedbin Importer

This module defines the unified exception hierarchy and a small
categorization helper used to turn failures into user-facing summaries.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests


# ============================================================================
# Unified Exception Hierarchy for Feedbin Importer
# ============================================================================
# All custom exceptions for the importer are defined here.
# Import these exceptions from feedbin_importer.utils.error_handler
# ============================================================================


class FeedbinImporterError(Exception):
    """Base exception for all feedbin importer errors."""

    pass


# ============================================================================
# Input Errors (detected before any remote call)
# ============================================================================


class InputError(FeedbinImporterError):
    """Problems with the source file; the batch never starts."""

    pass


class EmptyInputError(InputError):
    """The parsed table contains no rows."""

    pass


class MissingHeadersError(InputError):
    """One or more required columns are absent from the header row."""

    def __init__(self, message: str, missing: Optional[list] = None):
        super().__init__(message)
        self.missing = list(missing or [])


class CSVParsingError(InputError):
    """The tokenizer could not parse the file."""

    pass


class CSVEncodingError(InputError):
    """The file could not be decoded with any known encoding."""

    pass


# ============================================================================
# Credential Errors
# ============================================================================


class CredentialError(FeedbinImporterError):
    """Base class for credential problems."""

    pass


class InvalidCredentialsError(CredentialError):
    """Identity or secret failed local validation."""

    pass


# ============================================================================
# Submit Errors (per item, fatal to the current run)
# ============================================================================


class SubmitError(FeedbinImporterError):
    """Base class for failures while submitting one bookmark."""

    pass


class RemoteRejectedError(SubmitError):
    """The remote API answered with a non-success status."""

    def __init__(self, status_code: int, reason: str = "", operation: str = "import"):
        self.status_code = status_code
        self.reason = reason or ""
        self.operation = operation
        status_text = f"{status_code} {self.reason}".strip()
        if operation == "mark_read":
            message = f"Failed to mark item as read: {status_text}"
        elif operation == "verify":
            message = f"Failed to verify credentials: {status_text}"
        else:
            message = f"Failed to import item: {status_text}"
        super().__init__(message)

    @property
    def is_auth_failure(self) -> bool:
        return self.status_code in (401, 403)


class NetworkUnreachableError(SubmitError):
    """Connection failure or timeout talking to the remote API."""

    pass


class InvalidRecordError(SubmitError):
    """A record failed field checks right before submission."""

    pass


# ============================================================================
# Import Run Errors (programming errors around the driver)
# ============================================================================


class ImportRunError(FeedbinImporterError):
    """Base class for misuse of the import driver or status model."""

    pass


class ImportInProgressError(ImportRunError):
    """A run was started while another run is still active."""

    pass


class InvalidTransitionError(ImportRunError):
    """A status transition was requested from an illegal phase."""

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(FeedbinImporterError):
    """A configuration file or override could not be loaded or validated."""

    pass


class ErrorCategory(Enum):
    """Categories of errors for user-facing reporting."""

    INPUT = "input"  # Source file problems
    CREDENTIALS = "credentials"  # Local credential validation
    AUTH = "auth"  # Remote rejected the credentials
    NETWORK = "network"  # Connectivity issues or timeouts
    REMOTE = "remote"  # Any other remote rejection
    RECORD = "record"  # A single row is not submittable
    CONFIGURATION = "configuration"
    INTERNAL = "internal"  # Unclassified


@dataclass
class ErrorDetails:
    """Categorized error information for summaries."""

    category: ErrorCategory
    message: str
    hint: str = ""
    original_exception: Optional[Exception] = None


_HINTS = {
    ErrorCategory.INPUT: "Check that the file is a Pocket CSV export.",
    ErrorCategory.CREDENTIALS: "Enter the e-mail and password of your Feedbin account.",
    ErrorCategory.AUTH: "Feedbin rejected the credentials; check e-mail and password.",
    ErrorCategory.NETWORK: "Check your connection and run the import again.",
    ErrorCategory.REMOTE: "Feedbin refused the request; try again later.",
    ErrorCategory.RECORD: "Fix or remove the offending row and run the import again.",
    ErrorCategory.CONFIGURATION: "Fix the configuration file or command-line options.",
    ErrorCategory.INTERNAL: "",
}


def categorize_error(exception: Exception) -> ErrorDetails:
    """
    Map an exception to a reporting category.

    Args:
        exception: The exception raised by any layer of the importer

    Returns:
        ErrorDetails with category, message and hint
    """
    if isinstance(exception, InputError):
        category = ErrorCategory.INPUT
    elif isinstance(exception, CredentialError):
        category = ErrorCategory.CREDENTIALS
    elif isinstance(exception, RemoteRejectedError):
        category = ErrorCategory.AUTH if exception.is_auth_failure else ErrorCategory.REMOTE
    elif isinstance(exception, (NetworkUnreachableError, requests.exceptions.ConnectionError)):
        category = ErrorCategory.NETWORK
    elif isinstance(exception, requests.exceptions.Timeout):
        category = ErrorCategory.NETWORK
    elif isinstance(exception, InvalidRecordError):
        category = ErrorCategory.RECORD
    elif isinstance(exception, ConfigurationError):
        category = ErrorCategory.CONFIGURATION
    else:
        category = ErrorCategory.INTERNAL

    return ErrorDetails(
        category=category,
        message=str(exception),
        hint=_HINTS[category],
        original_exception=exception,
    )


def hint_for(category: ErrorCategory) -> str:
    """User-facing hint for an error category."""
    return _HINTS[category]
