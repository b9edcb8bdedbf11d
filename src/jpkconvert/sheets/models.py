"""Data models for raw tabular input."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class ParsedRow(BaseModel):
    """A single row of raw cell values."""

    index: int  # Original row number in the source (0-based)
    cells: list[str] = Field(default_factory=list)

    def cell(self, column: int) -> str:
        """Return the cell at a column, or an empty string past the row's end."""
        if 0 <= column < len(self.cells):
            return self.cells[column]
        return ""


class RawSheet(BaseModel):
    """A sheet of raw parsed data handed to the conversion core."""

    name: str = "sheet"
    headers: Optional[list[str]] = None
    rows: list[ParsedRow] = Field(default_factory=list)
    metadata: dict[str, str] = Field(default_factory=dict)  # system, document_type, subtype, ...

    @property
    def column_count(self) -> int:
        """Width of the sheet, taken from the first data row."""
        if not self.rows:
            return 0
        return len(self.rows[0].cells)

    @property
    def has_headers(self) -> bool:
        return bool(self.headers)

    def column_values(self, column: int, limit: Optional[int] = None) -> list[str]:
        """Collect raw values of one column, optionally from the first ``limit`` rows."""
        rows = self.rows if limit is None else self.rows[:limit]
        return [row.cell(column) for row in rows]

    @classmethod
    def from_rows(
        cls,
        rows: list[list[str]],
        headers: Optional[list[str]] = None,
        metadata: Optional[dict[str, str]] = None,
        name: str = "sheet",
    ) -> "RawSheet":
        """Build a sheet from plain lists of cell strings."""
        return cls(
            name=name,
            headers=headers,
            rows=[ParsedRow(index=i, cells=list(cells)) for i, cells in enumerate(rows)],
            metadata=metadata or {},
        )


class WarningLevel(str, Enum):
    """Severity of a reader warning."""

    INFO = "info"
    WARNING = "warning"


class ParseWarning(BaseModel):
    """A non-fatal problem noticed while reading a file."""

    level: WarningLevel = WarningLevel.WARNING
    message: str
    row: Optional[int] = None


class SheetReadResult(BaseModel):
    """Result returned by a sheet reader."""

    sheets: list[RawSheet] = Field(default_factory=list)
    encoding: str = "utf-8"
    separator: Optional[str] = None
    warnings: list[ParseWarning] = Field(default_factory=list)
