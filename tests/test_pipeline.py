"""Tests for the conversion pipeline."""

import pytest

from jpkconvert.mapping import (
    ColumnMapping,
    MappingMethod,
    MappingResult,
    ProfileRegistry,
)
from jpkconvert.pipeline import (
    ConversionPipeline,
    IssueSeverity,
    MappingSource,
    PipelineConfig,
    PipelineStage,
)
from jpkconvert.sheets import RawSheet, ReaderRegistry
from jpkconvert.transform import TransformOptions

SALES_HEADERS = ["nr_faktury", "data wystawienia", "netto_23"]


@pytest.fixture
def sales_pipeline(sales_catalogs):
    """Pipeline over the small sales catalog, without profiles."""
    return ConversionPipeline(catalogs=sales_catalogs, profiles=ProfileRegistry())


@pytest.fixture
def config():
    return PipelineConfig(document_type="TEST", subtype="Sprzedaz")


def messages(result, severity=None, stage=None):
    return [
        i.message
        for i in result.issues
        if (severity is None or i.severity == severity) and (stage is None or i.stage == stage)
    ]


class TestRunOnSheet:
    """Test runs on pre-parsed sheets."""

    def test_sales_row_converted(self, sales_pipeline, config, make_sheet, fixed_today):
        sheet = make_sheet([["FV/001", "15.01.2026", "100,50"]], headers=SALES_HEADERS)

        result = sales_pipeline.run_on_sheet(sheet, config)

        assert len(result.transformed_rows) == 1
        assert result.transformed_rows[0].values == {
            "DowodSprzedazy": "FV/001",
            "DataWystawienia": "2026-01-15",
            "K_10": "100.50",
        }
        assert result.warnings == []
        assert not result.has_errors
        assert result.mapping_source == MappingSource.AUTO
        assert "All 1 rows passed validation." in messages(result, IssueSeverity.INFO)

    def test_missing_required_value_is_one_error(self, sales_pipeline, config, make_sheet, fixed_today):
        sheet = make_sheet(
            [["FV/001", "15.01.2026", "1"], ["", "16.01.2026", "2"], ["FV/003", "17.01.2026", "3"]],
            headers=SALES_HEADERS,
        )

        result = sales_pipeline.run_on_sheet(sheet, config)

        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.row == 1
        assert error.field == "DowodSprzedazy"
        assert error.stage == PipelineStage.VALIDATE
        assert result.issues_for_row(1) == [error]

    def test_one_transformed_row_per_input_row(self, sales_pipeline, config, make_sheet, fixed_today):
        rows = [[f"FV/{i}", "bad date", "x"] for i in range(7)]
        result = sales_pipeline.run_on_sheet(make_sheet(rows, headers=SALES_HEADERS), config)
        assert [r.index for r in result.transformed_rows] == list(range(7))

    def test_transform_warnings_become_issues(self, sales_pipeline, config, make_sheet, fixed_today):
        sheet = make_sheet([["FV/1", "15.01.2026", "abc"]], headers=SALES_HEADERS)

        result = sales_pipeline.run_on_sheet(sheet, config)

        transform_warnings = [i for i in result.warnings if i.stage == PipelineStage.TRANSFORM]
        assert len(transform_warnings) == 1
        assert transform_warnings[0].row == 0
        assert transform_warnings[0].message == "Row 1, K_10: Invalid amount: abc"
        # The unparsed amount then fails validation
        assert [e.field for e in result.errors] == ["K_10"]

    def test_no_rows(self, sales_pipeline, config):
        result = sales_pipeline.run_on_sheet(RawSheet(headers=SALES_HEADERS), config)

        assert result.transformed_rows == []
        assert messages(result, IssueSeverity.ERROR, PipelineStage.PARSE) == [
            "Sheet contains no data rows."
        ]

    def test_nothing_mapped(self, sales_pipeline, config, make_sheet):
        sheet = make_sheet([["12"], ["7"]], headers=["xyz"])

        result = sales_pipeline.run_on_sheet(sheet, config)

        assert result.transformed_rows == []
        assert messages(result, IssueSeverity.ERROR, PipelineStage.MAP) == [
            "No column could be mapped to a document field."
        ]

    def test_unknown_catalog(self, sales_pipeline, make_sheet):
        config = PipelineConfig(document_type="JPK_XYZ", subtype="Nope")
        result = sales_pipeline.run_on_sheet(make_sheet([["a"]]), config)

        assert messages(result, IssueSeverity.WARNING, PipelineStage.MAP) == [
            "No field catalog for JPK_XYZ.Nope."
        ]
        assert result.has_errors

    def test_unmapped_required_warning(self, sales_pipeline, config, make_sheet):
        sheet = make_sheet([["FV/1", "ACME"]], headers=["nr_faktury", "nabywca"])

        result = sales_pipeline.run_on_sheet(sheet, config)

        validate_warnings = messages(result, IssueSeverity.WARNING, PipelineStage.VALIDATE)
        assert validate_warnings == [
            'Required field "DataWystawienia" (Data wystawienia) is not mapped to any column.'
        ]

    def test_skip_validation(self, sales_pipeline, make_sheet, fixed_today):
        config = PipelineConfig(document_type="TEST", subtype="Sprzedaz", skip_validation=True)
        sheet = make_sheet([["", "15.01.2026", "1"]], headers=SALES_HEADERS)

        result = sales_pipeline.run_on_sheet(sheet, config)

        assert not result.has_errors
        assert all(i.stage != PipelineStage.VALIDATE for i in result.issues)

    def test_transform_options_applied(self, sales_pipeline, make_sheet):
        config = PipelineConfig(
            document_type="TEST",
            subtype="Sprzedaz",
            transform_options=TransformOptions(decimal_places=3, allow_future_dates=True),
        )
        sheet = make_sheet([["FV/1", "01.01.2099", "1,5"]], headers=SALES_HEADERS)

        result = sales_pipeline.run_on_sheet(sheet, config)

        row = result.transformed_rows[0]
        assert row.get("K_10") == "1.500"
        assert row.get("DataWystawienia") == "2099-01-01"
        assert result.warnings == []

    def test_optional_unmapped_note(self, sales_pipeline, config, make_sheet, fixed_today):
        sheet = make_sheet([["FV/001", "15.01.2026", "100,50"]], headers=SALES_HEADERS)
        result = sales_pipeline.run_on_sheet(sheet, config)
        assert "2 optional fields are not mapped." in messages(result, IssueSeverity.INFO)


class TestMappingPrecedence:
    """Test custom > profile > auto mapping selection."""

    def test_custom_mapping_wins(self, pipeline, make_sheet):
        custom = MappingResult(
            mappings=[
                ColumnMapping(source_column=1, target_field="P_2", confidence=1.0,
                              method=MappingMethod.MANUAL),
            ]
        )
        config = PipelineConfig(document_type="JPK_FA", subtype="Faktura", custom_mapping=custom)
        sheet = make_sheet(
            [["PLN", "FV/1"]], system="NAMOS", document_type="JPK_FA", subtype="Faktura"
        )

        result = pipeline.run_on_sheet(sheet, config)

        assert result.mapping_source == MappingSource.CUSTOM
        assert result.transformed_rows[0].values == {"P_2": "FV/1"}
        assert "Using caller-supplied mapping." in messages(result, IssueSeverity.INFO)

    def test_profile_beats_auto(self, pipeline, make_sheet, fixed_today):
        sheet = make_sheet(
            [["PLN", "15.01.2026", "FV/1"]],
            headers=["nr_faktury", "waluta", "data"],
            system="NAMOS", document_type="JPK_FA", subtype="Faktura",
        )
        config = PipelineConfig(document_type="JPK_FA", subtype="Faktura")

        result = pipeline.run_on_sheet(sheet, config)

        assert result.mapping_source == MappingSource.PROFILE
        assert result.transformed_rows[0].values == {
            "KodWaluty": "PLN",
            "P_1": "2026-01-15",
            "P_2": "FV/1",
        }
        assert "Using system profile NAMOS -> JPK_FA Faktura." in messages(result)

    def test_profile_for_other_subtype_ignored(self, pipeline, make_sheet):
        sheet = make_sheet(
            [["FV/1"]], headers=["nr_faktury"],
            system="NAMOS", document_type="JPK_FA", subtype="Faktura",
        )
        config = PipelineConfig(document_type="JPK_VDEK", subtype="SprzedazWiersz")

        result = pipeline.run_on_sheet(sheet, config)

        assert result.mapping_source == MappingSource.AUTO
        assert result.mapping.for_column(0).target_field == "DowodSprzedazy"


class TestRun:
    """Test runs on raw file bytes."""

    def test_csv_file(self, sales_pipeline, config, fixed_today):
        data = "nr_faktury;data wystawienia;netto_23\nFV/001;15.01.2026;100,50\n".encode("utf-8")

        result = sales_pipeline.run(data, "sprzedaz.csv", config)

        assert result.read_result.separator == ";"
        assert result.sheet.headers == SALES_HEADERS
        assert result.transformed_rows[0].get("K_10") == "100.50"
        assert not result.has_errors

    def test_profile_from_metadata(self, pipeline, fixed_today):
        data = "PLN;15.01.2026;FV/1\nEUR;16.01.2026;FV/2\n".encode("utf-8")
        config = PipelineConfig(document_type="JPK_FA", subtype="Faktura")
        metadata = {"system": "NAMOS", "document_type": "JPK_FA", "subtype": "Faktura"}

        result = pipeline.run(data, "faktury.csv", config, metadata=metadata)

        assert result.mapping_source == MappingSource.PROFILE
        assert [r.get("P_2") for r in result.transformed_rows] == ["FV/1", "FV/2"]

    def test_reader_warnings_become_parse_issues(self, sales_pipeline, config, fixed_today):
        data = "nr_faktury;data wystawienia;netto_23\nFV/001;15.01.2026;100,50\nFV/002\n".encode()

        result = sales_pipeline.run(data, "sprzedaz.csv", config)

        parse_warnings = messages(result, IssueSeverity.WARNING, PipelineStage.PARSE)
        assert parse_warnings == ["Row 3: expected 3 columns, found 1"]
        assert len(result.transformed_rows) == 2

    def test_unreadable_file_does_not_raise(self, sales_pipeline, config):
        result = sales_pipeline.run(b"%PDF-1.4", "scan.pdf", config)

        assert result.transformed_rows == []
        assert messages(result, IssueSeverity.ERROR, PipelineStage.PARSE) == [
            "Failed to parse file: No reader available for file: scan.pdf"
        ]

    def test_empty_file(self, sales_pipeline, config):
        result = sales_pipeline.run(b"\n\n", "empty.csv", config)

        assert messages(result, IssueSeverity.WARNING, PipelineStage.PARSE) == ["File is empty"]
        assert messages(result, IssueSeverity.ERROR) == ["No data in file: no sheet found."]

    def test_failing_reader_is_reported(self, catalogs, profiles, config):
        """Any exception from a reader becomes a parse error."""

        class BrokenReader:
            name = "broken"
            supported_extensions = ("csv",)

            def can_read(self, data, filename):
                return True

            def read(self, data, filename, metadata=None):
                raise RuntimeError("disk on fire")

        readers = ReaderRegistry()
        readers.register(BrokenReader())
        pipeline = ConversionPipeline(catalogs=catalogs, profiles=profiles, readers=readers)

        result = pipeline.run(b"a;b", "x.csv", config)

        assert messages(result, IssueSeverity.ERROR) == ["Failed to parse file: disk on fire"]
