"""Raw sheet models and file readers."""

from .models import ParsedRow, RawSheet, ParseWarning, SheetReadResult, WarningLevel
from .reader import (
    CsvSheetReader,
    ReaderRegistry,
    SheetReader,
    SheetReadError,
    default_readers,
)

__all__ = [
    "ParsedRow",
    "RawSheet",
    "ParseWarning",
    "SheetReadResult",
    "WarningLevel",
    "CsvSheetReader",
    "ReaderRegistry",
    "SheetReader",
    "SheetReadError",
    "default_readers",
]
