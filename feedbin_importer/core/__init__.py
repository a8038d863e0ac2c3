"""
Core import modules.

This package contains the CSV validation, credential handling, Feedbin
client, status model and the sequential import driver.
"""

from .credential_gate import CredentialGate
from .csv_handler import PocketCSVHandler
from .data_models import (
    BookmarkRecord,
    Credentials,
    ImportPhase,
    ImportStatus,
    ItemState,
    ParsedTable,
    SubmitOutcome,
)
from .feedbin_client import FeedbinClient, MarkReadFailurePolicy
from .import_driver import ImportDriver
from .import_session import ImportSession
from .import_status import ImportStatusModel

__all__ = [
    'BookmarkRecord',
    'CredentialGate',
    'Credentials',
    'FeedbinClient',
    'ImportDriver',
    'ImportPhase',
    'ImportSession',
    'ImportStatus',
    'ImportStatusModel',
    'ItemState',
    'MarkReadFailurePolicy',
    'ParsedTable',
    'PocketCSVHandler',
    'SubmitOutcome',
]
