"""Pytest configuration and shared fixtures."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from jpkconvert.api import create_app
from jpkconvert.mapping import (
    CatalogRegistry,
    FieldDefinition,
    FieldType,
    ProfileRegistry,
    default_catalogs,
    default_profiles,
)
from jpkconvert.pipeline import ConversionPipeline
from jpkconvert.sheets import RawSheet
from jpkconvert.transform import values


@pytest.fixture
def fixed_today(monkeypatch):
    """Pin "today" so future-date checks are deterministic."""
    today = date(2026, 3, 1)
    monkeypatch.setattr(values, "_today", lambda: today)
    return today


@pytest.fixture
def catalogs() -> CatalogRegistry:
    """Bundled field catalogs."""
    return default_catalogs()


@pytest.fixture
def profiles() -> ProfileRegistry:
    """Bundled system profiles."""
    return default_profiles()


@pytest.fixture
def pipeline(catalogs, profiles) -> ConversionPipeline:
    """Pipeline over the bundled registries."""
    return ConversionPipeline(catalogs=catalogs, profiles=profiles)


@pytest.fixture
def sales_fields() -> list[FieldDefinition]:
    """A small sales catalog for mapping and validation tests."""
    return [
        FieldDefinition(name="DowodSprzedazy", label="Nr dokumentu", type=FieldType.STRING,
                        required=True, synonyms=("nr_faktury", "dokument")),
        FieldDefinition(name="DataWystawienia", label="Data wystawienia", type=FieldType.DATE,
                        required=True),
        FieldDefinition(name="NrKontrahenta", label="NIP kontrahenta", type=FieldType.NIP,
                        synonyms=("nip",)),
        FieldDefinition(name="K_10", label="Netto 23%", type=FieldType.DECIMAL,
                        synonyms=("netto_23",)),
        FieldDefinition(name="MPP", label="Split payment", type=FieldType.BOOLEAN),
    ]


@pytest.fixture
def sales_catalogs(sales_fields) -> CatalogRegistry:
    """Registry holding only the small sales catalog."""
    registry = CatalogRegistry()
    registry.register("TEST", "Sprzedaz", sales_fields)
    return registry


@pytest.fixture
def make_sheet():
    """Factory for raw sheets built from plain lists."""

    def _make(rows, headers=None, **metadata) -> RawSheet:
        return RawSheet.from_rows(rows, headers=headers, metadata=metadata)

    return _make


@pytest.fixture
def test_client(pipeline) -> TestClient:
    """Create a test client over the bundled pipeline."""
    return TestClient(create_app(pipeline))
