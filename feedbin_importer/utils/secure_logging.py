"""
Secure Logging Module

Provides logging helpers that redact credentials and personal data so
that Feedbin passwords, auth headers and account e-mails never reach a
log file.
"""

import logging
import re
from typing import Any, List, Pattern, Tuple


class SecureLogger:
    """Secure logging with automatic data sanitization"""

    # Patterns for sensitive data that should be redacted
    SENSITIVE_PATTERNS: List[Tuple[Pattern, str]] = [
        # password=..., secret: ..., token=...
        (
            re.compile(
                r'(?i)(password|passwd|secret|token|api[_-]?key)(["\']?\s*[:=]\s*["\']?)([^\s"\',&]+)'
            ),
            r"\1\2***REDACTED***",
        ),
        # Authorization headers
        (
            re.compile(r"(?i)\b(basic|bearer)\s+[A-Za-z0-9+/=._-]{6,}"),
            r"\1 ***REDACTED***",
        ),
        # Credentials embedded in URLs
        (
            re.compile(r"(?i)(://[^/\s:@]+:)([^@/\s]+)(@)"),
            r"\1***PASSWORD_REDACTED***\3",
        ),
        # Email addresses (account identities)
        (
            re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
            r"***EMAIL_REDACTED***",
        ),
    ]

    def __init__(self, logger_name: str = __name__):
        """Initialize secure logger"""
        self.logger = logging.getLogger(logger_name)

    def sanitize_message(self, message: Any) -> str:
        """
        Sanitize a message by redacting sensitive information.

        Args:
            message: Message to sanitize

        Returns:
            Sanitized message with sensitive data redacted
        """
        if not isinstance(message, str):
            message = str(message)

        sanitized = message
        for pattern, replacement in self.SENSITIVE_PATTERNS:
            sanitized = pattern.sub(replacement, sanitized)

        return sanitized

    def sanitize_data(self, data: Any) -> Any:
        """
        Recursively sanitize data structures.

        Args:
            data: Data to sanitize

        Returns:
            Sanitized data
        """
        if isinstance(data, str):
            return self.sanitize_message(data)
        elif isinstance(data, dict):
            return {key: self.sanitize_data(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [self.sanitize_data(item) for item in data]
        elif isinstance(data, tuple):
            return tuple(self.sanitize_data(item) for item in data)
        else:
            return data

    def warning(self, message: str) -> None:
        self.logger.warning(self.sanitize_message(message))

    def error(self, message: str) -> None:
        self.logger.error(self.sanitize_message(message))


class RedactingFilter(logging.Filter):
    """Logging filter that sanitizes every record passing through a handler."""

    def __init__(self, secure: "SecureLogger" = None):
        super().__init__()
        self.secure = secure or secure_logger

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self.secure.sanitize_message(record.getMessage())
        record.args = None
        return True


# Global secure logger instance
secure_logger = SecureLogger("feedbin_importer.security")


def sanitize_for_logging(data: Any) -> Any:
    """Convenience function for sanitizing data before logging"""
    return secure_logger.sanitize_data(data)
