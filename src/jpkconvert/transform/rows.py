"""Row-level transformation driven by a column mapping."""

import logging
from typing import Iterable

from ..mapping.models import ColumnMapping, FieldType
from ..sheets.models import ParsedRow
from .models import TransformedRow, TransformOptions
from .values import DEFAULT_OPTIONS, transform_value

logger = logging.getLogger(__name__)


def transform_row(
    row: ParsedRow,
    mappings: Iterable[ColumnMapping],
    field_types: dict[str, FieldType],
    options: TransformOptions = DEFAULT_OPTIONS,
) -> TransformedRow:
    """Transform every mapped cell of one row."""
    values: dict[str, str] = {}
    warnings: list[str] = []

    for mapping in mappings:
        raw = row.cell(mapping.source_column)
        field_type = field_types.get(mapping.target_field, FieldType.STRING)
        result = transform_value(raw, field_type, options)

        values[mapping.target_field] = result.value
        if result.warning:
            warnings.append(f"Row {row.index + 1}, {mapping.target_field}: {result.warning}")

    return TransformedRow(index=row.index, values=values, warnings=warnings)


def transform_rows(
    rows: list[ParsedRow],
    mappings: list[ColumnMapping],
    field_types: dict[str, FieldType],
    options: TransformOptions = DEFAULT_OPTIONS,
) -> list[TransformedRow]:
    """
    Transform all rows using a mapping.

    Produces exactly one TransformedRow per input row, in input order.
    Cells missing from short rows are treated as empty.
    """
    transformed = [transform_row(row, mappings, field_types, options) for row in rows]
    warning_count = sum(len(r.warnings) for r in transformed)
    logger.debug(f"Transformed {len(transformed)} rows with {warning_count} warnings")
    return transformed
