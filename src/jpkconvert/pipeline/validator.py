"""Business-rule validation of transformed rows."""

import logging
import re
from decimal import Decimal, InvalidOperation

from ..mapping.models import FieldDefinition, FieldType, MappingResult
from ..transform.models import TransformedRow
from ..transform.nip import clean_nip, is_valid_nip, TEN_DIGITS
from .models import IssueSeverity, PipelineIssue, PipelineStage

logger = logging.getLogger(__name__)

CANONICAL_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)


def _is_number(value: str) -> bool:
    if not value.isascii():
        return False
    try:
        return Decimal(value).is_finite()
    except InvalidOperation:
        return False


def _error(row: TransformedRow, field: FieldDefinition, message: str) -> PipelineIssue:
    return PipelineIssue(
        severity=IssueSeverity.ERROR,
        stage=PipelineStage.VALIDATE,
        message=f"Row {row.index + 1}: {message}",
        row=row.index,
        field=field.name,
    )


class RowValidator:
    """
    Validates transformed rows against a field catalog.

    Checks run independently; one failing check never hides another:
    - required fields must have a value
    - NIP fields must pass the mod-11 checksum
    - date fields must be in YYYY-MM-DD form
    - decimal fields must parse as numbers
    """

    def __init__(self, fields: list[FieldDefinition]):
        self.fields = fields
        self.required_fields = [f for f in fields if f.required]
        self.nip_fields = [f for f in fields if f.type == FieldType.NIP]
        self.date_fields = [f for f in fields if f.type == FieldType.DATE]
        self.decimal_fields = [f for f in fields if f.type == FieldType.DECIMAL]

    def check_unmapped_required(self, mapping: MappingResult) -> list[PipelineIssue]:
        """Report, once per run, required fields that have no column at all."""
        mapped = set(mapping.mapped_fields)
        return [
            PipelineIssue(
                severity=IssueSeverity.WARNING,
                stage=PipelineStage.VALIDATE,
                message=f'Required field "{field.name}" ({field.label}) is not mapped to any column.',
                field=field.name,
            )
            for field in self.required_fields
            if field.name not in mapped
        ]

    def validate_row(self, row: TransformedRow) -> list[PipelineIssue]:
        """Run every per-row check on one row."""
        issues: list[PipelineIssue] = []

        for field in self.required_fields:
            if not row.get(field.name):
                issues.append(
                    _error(row, field, f'missing required field "{field.name}" ({field.label}).')
                )

        # Same checksum as the NIP transform: custom mappings can route
        # values here without passing through it
        for field in self.nip_fields:
            value = row.get(field.name)
            if not value:
                continue
            cleaned = clean_nip(value)
            if TEN_DIGITS.match(cleaned) and not is_valid_nip(cleaned):
                issues.append(
                    _error(row, field, f'invalid NIP checksum in "{field.name}": {cleaned}.')
                )

        for field in self.date_fields:
            value = row.get(field.name)
            if value and not CANONICAL_DATE.match(value):
                issues.append(
                    _error(row, field, f'invalid date format in "{field.name}": {value}.')
                )

        for field in self.decimal_fields:
            value = row.get(field.name)
            if value and not _is_number(value):
                issues.append(
                    _error(row, field, f'invalid amount in "{field.name}": {value}.')
                )

        return issues

    def validate(
        self, rows: list[TransformedRow], mapping: MappingResult
    ) -> list[PipelineIssue]:
        """
        Validate all rows.

        Returns:
            Unmapped-required warnings first, then row errors in row order,
            then an info issue when no row failed
        """
        issues = self.check_unmapped_required(mapping)

        row_errors: list[PipelineIssue] = []
        for row in rows:
            row_errors.extend(self.validate_row(row))
        issues.extend(row_errors)

        if not row_errors:
            issues.append(
                PipelineIssue(
                    severity=IssueSeverity.INFO,
                    stage=PipelineStage.VALIDATE,
                    message=f"All {len(rows)} rows passed validation.",
                )
            )

        logger.info(f"Validated {len(rows)} rows: {len(row_errors)} errors")
        return issues
