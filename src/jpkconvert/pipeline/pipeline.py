"""Conversion pipeline: parse -> map -> transform -> validate."""

import logging
from typing import Optional

from ..mapping.auto_mapper import auto_map
from ..mapping.catalogs import CatalogRegistry, field_types
from ..mapping.models import FieldDefinition, MappingResult
from ..mapping.profiles import ProfileRegistry, SUBTYPE_KEY
from ..sheets.models import RawSheet, SheetReadResult, WarningLevel
from ..sheets.reader import ReaderRegistry, default_readers
from ..transform.rows import transform_rows
from .models import (
    IssueSeverity,
    MappingSource,
    PipelineConfig,
    PipelineIssue,
    PipelineResult,
    PipelineStage,
)
from .validator import RowValidator

logger = logging.getLogger(__name__)


class ConversionPipeline:
    """
    Main orchestrator for converting raw sheets into canonical rows.

    Flow:
    1. Parse: read the file with a reader collaborator (``run`` only)
    2. Map: explicit mapping, else a matching system profile, else auto-mapping
    3. Transform: convert raw values to canonical form
    4. Validate: required fields, NIP checksums, date and amount formats

    Bad data never raises; every problem becomes a PipelineIssue. A run stops
    early only when there are no data rows or no column could be mapped.
    """

    def __init__(
        self,
        catalogs: CatalogRegistry,
        profiles: ProfileRegistry,
        readers: Optional[ReaderRegistry] = None,
        sample_rows: int = 10,
    ):
        """
        Initialize the pipeline.

        Args:
            catalogs: Field catalogs, shared read-only between runs
            profiles: System profiles, shared read-only between runs
            readers: File readers for ``run`` (bundled readers if not provided)
            sample_rows: Rows sampled per column for type inference
        """
        self.catalogs = catalogs
        self.profiles = profiles
        self.readers = readers or default_readers()
        self.sample_rows = sample_rows

    def run(
        self,
        data: bytes,
        filename: str,
        config: PipelineConfig,
        metadata: Optional[dict[str, str]] = None,
    ) -> PipelineResult:
        """Run the full pipeline on raw file bytes."""
        issues: list[PipelineIssue] = []

        try:
            read_result = self.readers.read(data, filename, metadata)
        except Exception as e:
            logger.error(f"Failed to read {filename}: {e}")
            issues.append(
                PipelineIssue(
                    severity=IssueSeverity.ERROR,
                    stage=PipelineStage.PARSE,
                    message=f"Failed to parse file: {e}",
                )
            )
            return PipelineResult(issues=issues)

        for warning in read_result.warnings:
            issues.append(
                PipelineIssue(
                    severity=(
                        IssueSeverity.WARNING
                        if warning.level == WarningLevel.WARNING
                        else IssueSeverity.INFO
                    ),
                    stage=PipelineStage.PARSE,
                    message=warning.message,
                    row=warning.row,
                )
            )

        sheet = self.select_sheet(read_result, config)
        if sheet is None:
            issues.append(
                PipelineIssue(
                    severity=IssueSeverity.ERROR,
                    stage=PipelineStage.PARSE,
                    message="No data in file: no sheet found.",
                )
            )
            return PipelineResult(issues=issues, read_result=read_result)

        result = self.run_on_sheet(sheet, config)
        result.issues = issues + result.issues
        result.read_result = read_result
        return result

    def run_on_sheet(self, sheet: RawSheet, config: PipelineConfig) -> PipelineResult:
        """Run the pipeline on a pre-parsed sheet."""
        issues: list[PipelineIssue] = []

        if not sheet.rows:
            logger.warning(f"Sheet '{sheet.name}' has no data rows")
            issues.append(
                PipelineIssue(
                    severity=IssueSeverity.ERROR,
                    stage=PipelineStage.PARSE,
                    message="Sheet contains no data rows.",
                )
            )
            return PipelineResult(issues=issues, sheet=sheet)

        # Map
        fields = self.catalogs.get(config.document_type, config.subtype)
        if fields is None:
            issues.append(
                PipelineIssue(
                    severity=IssueSeverity.WARNING,
                    stage=PipelineStage.MAP,
                    message=f"No field catalog for {config.document_type}.{config.subtype}.",
                )
            )
            fields = []

        mapping, source, note = self.select_mapping(sheet, fields, config)

        if not mapping.mappings:
            logger.warning(f"No columns of sheet '{sheet.name}' could be mapped")
            issues.append(
                PipelineIssue(
                    severity=IssueSeverity.ERROR,
                    stage=PipelineStage.MAP,
                    message="No column could be mapped to a document field.",
                )
            )
            return PipelineResult(
                issues=issues, mapping=mapping, mapping_source=source, sheet=sheet
            )

        issues.append(
            PipelineIssue(severity=IssueSeverity.INFO, stage=PipelineStage.MAP, message=note)
        )
        issues.extend(self._unmapped_optional_note(mapping, fields))

        # Transform
        transformed = transform_rows(
            sheet.rows,
            mapping.mappings,
            field_types(fields),
            config.transform_options,
        )

        for row in transformed:
            for warning in row.warnings:
                issues.append(
                    PipelineIssue(
                        severity=IssueSeverity.WARNING,
                        stage=PipelineStage.TRANSFORM,
                        message=warning,
                        row=row.index,
                    )
                )

        # Validate
        if not config.skip_validation:
            issues.extend(RowValidator(fields).validate(transformed, mapping))

        logger.info(
            f"Converted sheet '{sheet.name}': {len(transformed)} rows, "
            f"{sum(1 for i in issues if i.severity == IssueSeverity.ERROR)} errors, "
            f"{sum(1 for i in issues if i.severity == IssueSeverity.WARNING)} warnings"
        )

        return PipelineResult(
            transformed_rows=transformed,
            issues=issues,
            mapping=mapping,
            mapping_source=source,
            sheet=sheet,
        )

    def select_mapping(
        self, sheet: RawSheet, fields: list[FieldDefinition], config: PipelineConfig
    ) -> tuple[MappingResult, MappingSource, str]:
        """
        Choose the mapping for a run.

        Precedence: explicit mapping from the config, then a profile matched
        on the sheet's metadata, then the auto-mapper.

        Returns:
            The mapping, its source, and a note describing the choice
        """
        if config.custom_mapping is not None:
            return config.custom_mapping, MappingSource.CUSTOM, "Using caller-supplied mapping."

        applied = self.profiles.apply(sheet, fields)
        if applied is not None:
            profile, mapping = applied
            if (profile.document_type, profile.subtype) == (config.document_type, config.subtype):
                return mapping, MappingSource.PROFILE, f"Using system profile {profile.name}."
            logger.debug(
                f"Profile {profile.id} targets {profile.document_type}.{profile.subtype}, "
                f"not {config.document_type}.{config.subtype}; falling back to auto-mapping"
            )

        mapping = auto_map(sheet, fields, sample_rows=self.sample_rows)
        return mapping, MappingSource.AUTO, "Using automatic column mapping."

    @staticmethod
    def select_sheet(read_result: SheetReadResult, config: PipelineConfig) -> Optional[RawSheet]:
        """Pick the sheet whose metadata names the configured subtype, else the first."""
        if not read_result.sheets:
            return None

        for sheet in read_result.sheets:
            if sheet.metadata.get(SUBTYPE_KEY) == config.subtype:
                return sheet

        return read_result.sheets[0]

    @staticmethod
    def _unmapped_optional_note(
        mapping: MappingResult, fields: list[FieldDefinition]
    ) -> list[PipelineIssue]:
        mapped = set(mapping.mapped_fields)
        optional = [f.name for f in fields if not f.required and f.name not in mapped]
        if not optional:
            return []
        return [
            PipelineIssue(
                severity=IssueSeverity.INFO,
                stage=PipelineStage.MAP,
                message=f"{len(optional)} optional fields are not mapped.",
            )
        ]
