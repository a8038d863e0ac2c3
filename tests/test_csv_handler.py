"""
Unit tests for CSV handler module.

Tests the PocketCSVHandler for reading and validating Pocket export files.
"""

from pathlib import Path

import pytest

from feedbin_importer.core.csv_handler import (
    EMPTY_INPUT_MESSAGE,
    MISSING_HEADERS_MESSAGE,
    PocketCSVHandler,
)
from feedbin_importer.utils.error_handler import (
    CSVParsingError,
    EmptyInputError,
    MissingHeadersError,
)
from tests.fixtures.test_data import SAMPLE_POCKET_ROWS, create_sample_csv_content


class TestValidate:
    """Test shape validation of parsed rows."""

    @pytest.fixture
    def handler(self):
        return PocketCSVHandler()

    def test_valid_rows(self, handler, sample_rows):
        records = handler.validate(sample_rows)

        assert len(records) == 3
        assert [r.title for r in records] == [row["title"] for row in SAMPLE_POCKET_ROWS]

    def test_empty_rows(self, handler):
        with pytest.raises(EmptyInputError) as exc_info:
            handler.validate([])

        assert str(exc_info.value) == "Empty CSV file"

    def test_missing_tags_column(self, handler):
        rows = [{"title": "a", "url": "https://a.example", "time_added": "1", "status": "unread"}]

        with pytest.raises(MissingHeadersError) as exc_info:
            handler.validate(rows)

        assert str(exc_info.value) == (
            "CSV is missing required headers: title, url, time_added, tags, status"
        )
        assert exc_info.value.missing == ["tags"]

    def test_extra_columns_ignored(self, handler, sample_rows):
        for row in sample_rows:
            row["excerpt"] = "something"

        records = handler.validate(sample_rows)

        assert records[0].to_dict() == SAMPLE_POCKET_ROWS[0]

    def test_rows_are_not_inspected(self, handler):
        rows = [{"title": "", "url": "not a url", "time_added": "x", "tags": "", "status": "weird"}]

        records = handler.validate(rows)

        assert records[0].url == "not a url"

    def test_parse_rows_reports_error_in_table(self, handler):
        table = handler.parse_rows([])

        assert not table.is_valid
        assert table.error == EMPTY_INPUT_MESSAGE


class TestReadFile:
    """Test reading Pocket exports from disk."""

    @pytest.fixture
    def handler(self):
        return PocketCSVHandler()

    def test_parse_file(self, handler, sample_csv_file):
        table = handler.parse_file(sample_csv_file)

        assert table.is_valid
        assert len(table) == 3
        assert table.records[1].status == "archive"
        assert table.records[0].tags == "python|docs"
        assert table.records[1].tags == ""

    def test_values_stay_text(self, handler, sample_csv_file):
        table = handler.parse_file(sample_csv_file)

        assert table.records[0].time_added == "1704456000"

    def test_blank_lines_skipped(self, handler, tmp_path):
        path = tmp_path / "blank.csv"
        content = create_sample_csv_content().replace("\n", "\n\n", 1) + "\n\n"
        path.write_text(content, encoding="utf-8")

        table = handler.parse_file(path)

        assert len(table) == 3

    def test_quoted_title_with_comma(self, handler, tmp_path):
        rows = [dict(SAMPLE_POCKET_ROWS[0], title='Hello, "World"')]
        path = tmp_path / "quoted.csv"
        path.write_text(create_sample_csv_content(rows), encoding="utf-8")

        table = handler.parse_file(path)

        assert table.records[0].title == 'Hello, "World"'

    def test_header_only_file_is_empty(self, handler, tmp_path):
        path = tmp_path / "header.csv"
        path.write_text("title,url,time_added,tags,status\n", encoding="utf-8")

        table = handler.parse_file(path)

        assert table.error == EMPTY_INPUT_MESSAGE

    def test_zero_byte_file_is_empty(self, handler, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_bytes(b"")

        table = handler.parse_file(path)

        assert table.error == EMPTY_INPUT_MESSAGE

    def test_missing_headers_file(self, handler, tmp_path):
        path = tmp_path / "noheaders.csv"
        path.write_text("title,url,time_added,status\na,https://a.example,1,unread\n", encoding="utf-8")

        table = handler.parse_file(path)

        assert table.error == MISSING_HEADERS_MESSAGE

    def test_header_whitespace_stripped(self, handler, tmp_path):
        path = tmp_path / "spaces.csv"
        path.write_text(
            "title, url ,time_added,tags,status\na,https://a.example,1,,unread\n",
            encoding="utf-8",
        )

        table = handler.parse_file(path)

        assert table.is_valid
        assert table.records[0].url == "https://a.example"

    def test_missing_file(self, handler, tmp_path):
        with pytest.raises(CSVParsingError):
            handler.read_csv_file(tmp_path / "nope.csv")

    def test_missing_file_reported_in_table(self, handler, tmp_path):
        table = handler.parse_file(tmp_path / "nope.csv")

        assert table.error.startswith("Error parsing CSV: ")

    def test_tokenizer_error_reported_in_table(self, handler, tmp_path):
        path = tmp_path / "broken.csv"
        path.write_text(
            "title,url,time_added,tags,status\n"
            "a,https://a.example,1,,unread\n"
            "b,https://b.example,2,,unread,extra,cells\n",
            encoding="utf-8",
        )

        table = handler.parse_file(path)

        assert not table.is_valid
        assert table.error.startswith("Error parsing CSV: ")

    def test_latin1_file(self, handler, tmp_path):
        path = tmp_path / "latin1.csv"
        content = "title,url,time_added,tags,status\nCaf\xe9 notes,https://a.example,1,,unread\n"
        path.write_bytes(content.encode("latin1"))

        table = handler.parse_file(path)

        assert table.is_valid
        assert len(table) == 1
        assert table.records[0].title.startswith("Caf")

    def test_detect_encoding_unreadable_path(self, handler, tmp_path):
        assert handler.detect_encoding(tmp_path / "missing.csv") == "utf-8"
