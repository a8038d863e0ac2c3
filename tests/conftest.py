"""
Pytest configuration and shared fixtures for Feedbin importer tests.

This module provides common fixtures and mocks that are shared across
multiple test modules. No test talks to the real Feedbin API.
"""

import threading
from pathlib import Path
from typing import List
from unittest.mock import MagicMock

import pytest

from feedbin_importer.core.data_models import BookmarkRecord, Credentials, SubmitOutcome
from feedbin_importer.core.feedbin_client import FeedbinClient
from feedbin_importer.core.import_status import ImportStatusModel
from tests.fixtures.test_data import (
    SAMPLE_POCKET_ROWS,
    create_mock_response,
    create_sample_csv_content,
    create_sample_records,
)

# ============================================================================
# Data Fixtures
# ============================================================================


@pytest.fixture
def sample_rows() -> List[dict]:
    """Sample Pocket rows as parsed dictionaries."""
    return [dict(row) for row in SAMPLE_POCKET_ROWS]


@pytest.fixture
def sample_records() -> List[BookmarkRecord]:
    """Sample rows as BookmarkRecord objects."""
    return create_sample_records()


@pytest.fixture
def credentials() -> Credentials:
    """Valid-looking Feedbin credentials."""
    return Credentials("reader@example.com", "correct horse battery")


@pytest.fixture
def sample_csv_file(tmp_path: Path) -> Path:
    """A Pocket export on disk."""
    path = tmp_path / "part_000000.csv"
    path.write_text(create_sample_csv_content(), encoding="utf-8")
    return path


# ============================================================================
# Import Fixtures
# ============================================================================


class RecordingSubmitter:
    """Submitter double that records calls and can fail on chosen items."""

    def __init__(self, failures=None):
        self.calls: List[BookmarkRecord] = []
        self.failures = dict(failures or {})
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()
        self.closed = False

    def submit_one(self, credentials, record):
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            index = len(self.calls)
            self.calls.append(record)
            if index in self.failures:
                raise self.failures[index]
            return SubmitOutcome(entry_id=1000 + index)
        finally:
            with self._lock:
                self.in_flight -= 1

    def close(self):
        self.closed = True


@pytest.fixture
def recording_submitter() -> RecordingSubmitter:
    return RecordingSubmitter()


@pytest.fixture
def status_model() -> ImportStatusModel:
    return ImportStatusModel()


@pytest.fixture
def mock_session() -> MagicMock:
    """requests.Session stand-in answering every call with 200 and an id."""
    session = MagicMock()
    session.request.return_value = create_mock_response(200, {"id": 42})
    return session


@pytest.fixture
def feedbin_client(mock_session: MagicMock) -> FeedbinClient:
    """FeedbinClient wired to the mock session."""
    return FeedbinClient(base_url="https://api.feedbin.test", timeout=5, session=mock_session)
