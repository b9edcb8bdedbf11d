"""Heuristic and positional mapping of sheet columns onto field catalogs."""

import logging
from typing import Optional

from ..sheets.models import RawSheet
from .inference import MAX_SAMPLES, infer_type
from .matcher import is_viable, match_header
from .models import ColumnMapping, FieldDefinition, MappingMethod, MappingResult

logger = logging.getLogger(__name__)

# Type-only matches always rank below any viable header match
TYPE_MATCH_CONFIDENCE = 0.4


def _build_result(
    mappings: list[ColumnMapping], fields: list[FieldDefinition], column_count: int
) -> MappingResult:
    """Sort mappings by column and compute the unmapped complements."""
    mapped_fields = {m.target_field for m in mappings}
    mapped_columns = {m.source_column for m in mappings}
    return MappingResult(
        mappings=sorted(mappings, key=lambda m: m.source_column),
        unmapped_fields=[f.name for f in fields if f.name not in mapped_fields],
        unmapped_columns=[c for c in range(column_count) if c not in mapped_columns],
    )


def _claim_greedily(
    candidates: list[tuple[int, int, float, MappingMethod]],
    used_columns: set[int],
    used_fields: set[int],
) -> list[tuple[int, int, float, MappingMethod]]:
    """
    Assign candidates highest confidence first, skipping claimed columns/fields.

    The sort is stable, so equal confidences keep generation order.
    """
    claimed = []
    for col, field_idx, confidence, method in sorted(candidates, key=lambda c: -c[2]):
        if col in used_columns or field_idx in used_fields:
            continue
        claimed.append((col, field_idx, confidence, method))
        used_columns.add(col)
        used_fields.add(field_idx)
    return claimed


def _header_at(headers: Optional[list[str]], column: int) -> Optional[str]:
    if headers and 0 <= column < len(headers):
        return headers[column]
    return None


def auto_map(
    sheet: RawSheet, fields: list[FieldDefinition], sample_rows: int = MAX_SAMPLES
) -> MappingResult:
    """
    Map sheet columns to catalog fields.

    Strategy:
    1. If headers exist, score every header against every field and assign
       greedily, highest confidence first
    2. For columns and fields left over, infer each column's type from sample
       values and pair it with a field of the same type (confidence 0.4)

    Each column maps to at most one field and vice versa.

    Args:
        sheet: The raw sheet to map
        fields: Field catalog for the target document subtype
        sample_rows: Number of leading rows sampled for type inference

    Returns:
        MappingResult with mappings sorted by source column
    """
    column_count = sheet.column_count

    if column_count == 0 or not fields:
        return _build_result([], fields, column_count)

    mappings: list[ColumnMapping] = []
    used_columns: set[int] = set()
    used_fields: set[int] = set()

    # Phase 1: headers
    if sheet.headers:
        candidates = []
        for col, header in enumerate(sheet.headers[:column_count]):
            if not header or not header.strip():
                continue
            for field_idx, field in enumerate(fields):
                match = match_header(header, field)
                if is_viable(match):
                    candidates.append((col, field_idx, match.confidence, match.method))

        for col, field_idx, confidence, method in _claim_greedily(
            candidates, used_columns, used_fields
        ):
            logger.debug(
                f"Header '{sheet.headers[col]}' -> {fields[field_idx].name} "
                f"({method.value}, {confidence:.2f})"
            )
            mappings.append(
                ColumnMapping(
                    source_column=col,
                    source_header=sheet.headers[col],
                    target_field=fields[field_idx].name,
                    confidence=confidence,
                    method=method,
                )
            )

    # Phase 2: inferred types
    remaining_fields = [i for i in range(len(fields)) if i not in used_fields]
    remaining_columns = [c for c in range(column_count) if c not in used_columns]

    if remaining_fields and remaining_columns:
        candidates = []
        for col in remaining_columns:
            inferred = infer_type(sheet.column_values(col, limit=sample_rows))
            if inferred is None:
                continue
            for field_idx in remaining_fields:
                if fields[field_idx].type == inferred:
                    candidates.append((col, field_idx, TYPE_MATCH_CONFIDENCE, MappingMethod.PATTERN))

        for col, field_idx, confidence, method in _claim_greedily(
            candidates, used_columns, used_fields
        ):
            logger.debug(f"Column {col} -> {fields[field_idx].name} (type match)")
            mappings.append(
                ColumnMapping(
                    source_column=col,
                    source_header=_header_at(sheet.headers, col),
                    target_field=fields[field_idx].name,
                    confidence=confidence,
                    method=method,
                )
            )

    result = _build_result(mappings, fields, column_count)
    logger.info(
        f"Auto-mapped {len(result.mappings)} of {column_count} columns "
        f"onto {len(fields)} fields"
    )
    return result


def apply_positional_mapping(
    column_count: int, position_map: dict[int, str], fields: list[FieldDefinition]
) -> MappingResult:
    """
    Apply a fixed column-position -> field-name map.

    Out-of-range columns and unknown field names are skipped silently. When
    several positions name the same field, the lowest column keeps it.
    """
    field_names = {f.name for f in fields}
    mappings: list[ColumnMapping] = []
    claimed: set[str] = set()

    for col in sorted(position_map):
        field_name = position_map[col]
        if col < 0 or col >= column_count:
            continue
        if field_name not in field_names or field_name in claimed:
            continue
        mappings.append(
            ColumnMapping(
                source_column=col,
                target_field=field_name,
                confidence=1.0,
                method=MappingMethod.POSITION,
            )
        )
        claimed.add(field_name)

    return _build_result(mappings, fields, column_count)


def set_manual_mapping(
    result: MappingResult,
    column: int,
    field_name: str,
    fields: list[FieldDefinition],
    column_count: int,
    header: Optional[str] = None,
) -> MappingResult:
    """
    Return a copy of ``result`` with ``column`` mapped to ``field_name`` by hand.

    Any existing mapping on the same column or the same field is replaced.
    """
    if column < 0 or column >= column_count:
        raise ValueError(f"Column {column} out of range (0..{column_count - 1})")
    if field_name not in {f.name for f in fields}:
        raise ValueError(f"Unknown field: {field_name}")

    kept = [
        m for m in result.mappings
        if m.source_column != column and m.target_field != field_name
    ]
    kept.append(
        ColumnMapping(
            source_column=column,
            source_header=header,
            target_field=field_name,
            confidence=1.0,
            method=MappingMethod.MANUAL,
        )
    )
    return _build_result(kept, fields, column_count)


def remove_mapping(
    result: MappingResult, column: int, fields: list[FieldDefinition], column_count: int
) -> MappingResult:
    """Return a copy of ``result`` without the mapping on ``column``."""
    kept = [m for m in result.mappings if m.source_column != column]
    return _build_result(kept, fields, column_count)
