"""
CSV handling module for Pocket bookmark exports.

This module reads the CSV file produced by Pocket's export page and
validates its shape before any bookmark is handed to the importer.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import chardet
import pandas as pd

from .data_models import REQUIRED_COLUMNS, BookmarkRecord, ParsedTable
from ..utils.error_handler import (
    CSVEncodingError,
    CSVParsingError,
    EmptyInputError,
    InputError,
    MissingHeadersError,
)

EMPTY_INPUT_MESSAGE = "Empty CSV file"
MISSING_HEADERS_MESSAGE = (
    "CSV is missing required headers: " + ", ".join(REQUIRED_COLUMNS)
)


class PocketCSVHandler:
    """Handles the Pocket export CSV format."""

    REQUIRED_COLUMNS = list(REQUIRED_COLUMNS)

    def __init__(self):
        """Initialize the CSV handler."""
        self.logger = logging.getLogger(__name__)

    def detect_encoding(self, file_path: Union[str, Path]) -> str:
        """
        Detect the encoding of a CSV file.

        Args:
            file_path: Path to the CSV file

        Returns:
            Detected encoding string
        """
        path = Path(file_path)

        try:
            with open(path, "rb") as f:
                # First 64KB is enough for detection
                sample = f.read(65536)
                result = chardet.detect(sample)
        except OSError as e:
            self.logger.warning(f"Encoding detection failed: {e}, using utf-8")
            return "utf-8"

        encoding = result.get("encoding") or "utf-8"
        confidence = result.get("confidence") or 0.0

        self.logger.debug(
            f"Detected encoding: {encoding} (confidence: {confidence:.2f})"
        )

        if confidence < 0.7:
            self.logger.warning(
                f"Low encoding confidence ({confidence:.2f}), using utf-8"
            )
            encoding = "utf-8"

        return encoding

    def read_csv_file(
        self, file_path: Union[str, Path], encoding: Optional[str] = None
    ) -> List[Dict[str, str]]:
        """
        Read CSV file into a list of row mappings.

        Args:
            file_path: Path to the CSV file
            encoding: Specific encoding to use (auto-detected if None)

        Returns:
            Rows in file order, keyed by header name. Blank lines are skipped.

        Raises:
            CSVParsingError: If the file is missing or cannot be tokenized
            CSVEncodingError: If no encoding can decode the file
        """
        path = Path(file_path)

        if not path.exists():
            raise CSVParsingError(f"CSV file does not exist: {file_path}")

        if not path.is_file():
            raise CSVParsingError(f"Path is not a file: {file_path}")

        if encoding is None:
            encoding = self.detect_encoding(path)

        self.logger.info(f"Reading CSV file: {path.name} (encoding: {encoding})")

        encodings_to_try = [encoding]
        for fallback in ("utf-8", "utf-8-sig", "latin1", "cp1252"):
            if fallback not in encodings_to_try:
                encodings_to_try.append(fallback)

        last_error = None

        for enc in encodings_to_try:
            try:
                self.logger.debug(f"Trying encoding: {enc}")

                df = pd.read_csv(
                    path,
                    encoding=enc,
                    dtype=str,  # Keep every cell as text
                    na_filter=False,  # Don't convert empty strings to NaN
                    skip_blank_lines=True,
                )

            except UnicodeDecodeError as e:
                last_error = e
                self.logger.debug(f"Encoding {enc} failed: {e}")
                continue
            except pd.errors.EmptyDataError:
                self.logger.info(f"CSV file has no content: {path.name}")
                return []
            except pd.errors.ParserError as parse_error:
                raise CSVParsingError(str(parse_error)) from parse_error

            self.logger.info(
                f"Parse complete, rows: {df.shape[0]}, columns: {df.shape[1]}"
            )
            return self.dataframe_to_rows(df)

        raise CSVEncodingError(
            f"Could not read CSV file '{path.name}' with any encoding. "
            f"Tried encodings: {', '.join(encodings_to_try)}. "
            f"Last error: {last_error}"
        )

    @staticmethod
    def dataframe_to_rows(df: pd.DataFrame) -> List[Dict[str, str]]:
        """Convert a DataFrame to header-keyed rows, stripping header whitespace."""
        df = df.rename(columns=lambda c: str(c).strip())
        return df.to_dict(orient="records")

    def validate(self, rows: Sequence[Mapping[str, Any]]) -> Tuple[BookmarkRecord, ...]:
        """
        Confirm the table is non-empty and carries the required columns.

        Only the shape is checked here. Individual rows are not inspected,
        so a malformed row fails later, at submission time, as that
        item's failure.

        Args:
            rows: Parsed rows keyed by header name

        Returns:
            All rows as BookmarkRecord values, in the original order

        Raises:
            EmptyInputError: If rows is empty
            MissingHeadersError: If a required column is absent
        """
        if not rows:
            raise EmptyInputError(EMPTY_INPUT_MESSAGE)

        first_row_keys = set(rows[0].keys())
        missing = [c for c in self.REQUIRED_COLUMNS if c not in first_row_keys]
        if missing:
            self.logger.debug(f"Missing columns: {', '.join(missing)}")
            raise MissingHeadersError(MISSING_HEADERS_MESSAGE, missing=missing)

        return tuple(BookmarkRecord.from_row(row) for row in rows)

    def parse_rows(self, rows: Sequence[Mapping[str, Any]]) -> ParsedTable:
        """Validate already tokenized rows into a ParsedTable."""
        try:
            records = self.validate(rows)
        except InputError as e:
            self.logger.info(f"Validation failed: {e}")
            return ParsedTable.from_error(str(e))

        self.logger.info(f"Loaded {len(records)} bookmarks")
        return ParsedTable.from_records(records)

    def parse_file(self, file_path: Union[str, Path]) -> ParsedTable:
        """
        Read and validate a Pocket export.

        Never raises for bad input: every failure is reported through
        ParsedTable.error so callers can show it directly.
        """
        try:
            rows = self.read_csv_file(file_path)
        except (CSVParsingError, CSVEncodingError) as e:
            self.logger.error(f"CSV parsing error: {e}")
            return ParsedTable.from_error(f"Error parsing CSV: {e}")

        return self.parse_rows(rows)
