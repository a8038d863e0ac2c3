"""
Credential gate for the import session.

Holds the Feedbin credentials for the lifetime of one session and
decides whether an import may proceed or has to wait for user input.
"""

import logging
import re
import threading
from typing import Callable, Optional

from .data_models import Credentials
from ..utils.error_handler import InvalidCredentialsError

# Loose e-mail shape check; Feedbin does the real validation
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class CredentialGate:
    """
    Owns zero or one Credentials value and the prompt-visible flag.

    When an action needs credentials that are not there yet, the gate
    raises the prompt and parks the action as a single pending
    continuation. Submitting valid credentials hides the prompt; the
    parked action is handed back through take_pending().
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._credentials: Optional[Credentials] = None
        self._prompt_visible = False
        self._pending: Optional[Callable[[Credentials], None]] = None

    @property
    def credentials(self) -> Optional[Credentials]:
        return self._credentials

    @property
    def has_credentials(self) -> bool:
        return self._credentials is not None

    @property
    def prompt_visible(self) -> bool:
        return self._prompt_visible

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def request_credentials(self) -> None:
        """Show the credential prompt. Does not wait for input."""
        with self._lock:
            self._prompt_visible = True
        self.logger.info("Credentials requested")

    def dismiss(self) -> None:
        """Hide the prompt and drop any parked action."""
        with self._lock:
            self._prompt_visible = False
            self._pending = None

    def submit(self, identity: str, secret: str) -> Credentials:
        """
        Validate and store credentials, then hide the prompt.

        Args:
            identity: Feedbin account e-mail
            secret: Feedbin account password

        Returns:
            The stored Credentials

        Raises:
            InvalidCredentialsError: If either value is empty or the
                identity is not e-mail shaped. The prompt stays visible.
        """
        identity = (identity or "").strip()
        if not identity or not secret:
            raise InvalidCredentialsError("Email and password are required")
        if not EMAIL_PATTERN.match(identity):
            raise InvalidCredentialsError("Email must be a valid email address")

        credentials = Credentials(identity, secret)
        with self._lock:
            self._credentials = credentials
            self._prompt_visible = False
        self.logger.info("Credentials provided")
        return credentials

    def clear(self) -> None:
        """Forget the stored credentials."""
        with self._lock:
            self._credentials = None

    def ensure_authorized(self, proceed: Callable[[Credentials], None]) -> bool:
        """
        Run proceed now if credentials are present, otherwise defer it.

        Args:
            proceed: Callback receiving the credentials

        Returns:
            True if proceed ran, False if it was parked behind the prompt
        """
        credentials = self._credentials
        if credentials is not None:
            proceed(credentials)
            return True

        with self._lock:
            self._pending = proceed
        self.request_credentials()
        return False

    def take_pending(self) -> Optional[Callable[[Credentials], None]]:
        """Remove and return the parked action, if any."""
        with self._lock:
            pending, self._pending = self._pending, None
        return pending
