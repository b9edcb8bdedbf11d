"""Thin file readers that turn delimited exports into raw sheets."""

import csv
import io
import logging
import re
from pathlib import PurePath
from typing import Optional, Protocol

from .models import ParseWarning, RawSheet, ParsedRow, SheetReadResult, WarningLevel

logger = logging.getLogger(__name__)

SEPARATOR_CANDIDATES = (";", ",", "\t", "|")
NUMBER_PATTERN = re.compile(r"^-?\d+([.,]\d+)?$", re.ASCII)

# Order matters: utf-8 is strict, windows-1250 accepts any byte sequence
ENCODINGS = ("utf-8-sig", "windows-1250")


class SheetReadError(Exception):
    """Exception raised when a file cannot be read into sheets."""

    pass


class SheetReader(Protocol):
    """Interface every file reader implements."""

    name: str
    supported_extensions: tuple[str, ...]

    def can_read(self, data: bytes, filename: str) -> bool: ...

    def read(
        self, data: bytes, filename: str, metadata: Optional[dict[str, str]] = None
    ) -> SheetReadResult: ...


def _extension(filename: str) -> str:
    return PurePath(filename).suffix.lower().lstrip(".")


def decode_bytes(data: bytes) -> tuple[str, str]:
    """Decode file bytes, returning the text and the encoding that worked."""
    for encoding in ENCODINGS:
        try:
            return data.decode(encoding), encoding
        except UnicodeDecodeError:
            continue
    raise SheetReadError("Unable to decode file contents")


def detect_separator(lines: list[str]) -> str:
    """
    Pick the separator that splits the sample lines most consistently.

    A candidate scores only when it appears the same number of times on
    every sampled line; the highest such count wins. Falls back to the most
    frequent candidate, then to a semicolon.
    """
    sample = lines[:20]
    best: Optional[str] = None
    best_count = 0

    for candidate in SEPARATOR_CANDIDATES:
        counts = {line.count(candidate) for line in sample}
        if len(counts) == 1:
            count = counts.pop()
            if count > best_count:
                best, best_count = candidate, count

    if best:
        return best

    totals = {c: sum(line.count(c) for line in sample) for c in SEPARATOR_CANDIDATES}
    candidate = max(totals, key=totals.get)
    return candidate if totals[candidate] > 0 else ";"


def looks_like_header(first_row: list[str], data: list[list[str]]) -> bool:
    """
    Guess whether the first row is a header.

    True when every cell in the first row is non-empty and non-numeric and
    the second row carries at least one number.
    """
    if len(data) < 2:
        return False

    if not all(cell.strip() and not NUMBER_PATTERN.match(cell.strip()) for cell in first_row):
        return False

    return any(NUMBER_PATTERN.match(cell.strip()) for cell in data[1])


class CsvSheetReader:
    """Read CSV/TXT exports with separator and header auto-detection."""

    name = "csv"
    supported_extensions = ("csv", "txt")

    def __init__(self, header: Optional[bool] = None):
        """
        Args:
            header: True/False to force header handling, None to auto-detect
        """
        self.header = header

    def can_read(self, data: bytes, filename: str) -> bool:
        if _extension(filename) not in self.supported_extensions:
            return False
        # Binary files carry NUL bytes early on
        return b"\x00" not in data[:1024]

    def read(
        self, data: bytes, filename: str, metadata: Optional[dict[str, str]] = None
    ) -> SheetReadResult:
        text, encoding = decode_bytes(data)
        warnings: list[ParseWarning] = []

        lines = [line for line in text.splitlines() if line.strip()]
        if not lines:
            return SheetReadResult(
                sheets=[],
                encoding=encoding,
                warnings=[ParseWarning(message="File is empty")],
            )

        separator = detect_separator(lines)
        try:
            records = [
                [cell.strip() for cell in record]
                for record in csv.reader(io.StringIO("\n".join(lines)), delimiter=separator)
            ]
        except csv.Error as e:
            raise SheetReadError(f"Malformed delimited data: {e}") from e

        if encoding != "utf-8-sig":
            warnings.append(
                ParseWarning(level=WarningLevel.INFO, message=f"Decoded as {encoding}")
            )

        first_row = records[0]
        has_header = self.header if self.header is not None else looks_like_header(first_row, records)
        headers = first_row if has_header else None
        body = records[1:] if has_header else records
        offset = 1 if has_header else 0

        expected = len(first_row)
        rows: list[ParsedRow] = []
        for i, cells in enumerate(body):
            if len(cells) != expected:
                warnings.append(
                    ParseWarning(
                        message=f"Row {i + offset + 1}: expected {expected} columns, found {len(cells)}",
                        row=i,
                    )
                )
                cells = (cells + [""] * expected)[:max(expected, len(cells))]
            rows.append(ParsedRow(index=i, cells=cells))

        logger.info(
            f"Read {len(rows)} rows from {filename} "
            f"(encoding={encoding}, separator={separator!r}, header={has_header})"
        )

        sheet = RawSheet(
            name=filename,
            headers=headers,
            rows=rows,
            metadata=dict(metadata or {}),
        )
        return SheetReadResult(
            sheets=[sheet],
            encoding=encoding,
            separator=separator,
            warnings=warnings,
        )


class ReaderRegistry:
    """Registry of file readers, consulted in registration order."""

    def __init__(self):
        self._readers: list[SheetReader] = []

    def register(self, reader: SheetReader):
        """Register a reader."""
        self._readers.append(reader)

    def list_readers(self) -> list[SheetReader]:
        return list(self._readers)

    def find(self, data: bytes, filename: str) -> Optional[SheetReader]:
        """Return the first reader able to handle the file."""
        for reader in self._readers:
            if reader.can_read(data, filename):
                return reader
        return None

    def read(
        self, data: bytes, filename: str, metadata: Optional[dict[str, str]] = None
    ) -> SheetReadResult:
        """Read a file with the first matching reader."""
        reader = self.find(data, filename)
        if reader is None:
            raise SheetReadError(f"No reader available for file: {filename}")
        return reader.read(data, filename, metadata)


def default_readers(header: Optional[bool] = None) -> ReaderRegistry:
    """Build the registry of bundled readers."""
    registry = ReaderRegistry()
    registry.register(CsvSheetReader(header=header))
    return registry
