"""Tests for the HTTP API."""

from jpkconvert.api import build_pipeline
from jpkconvert.config import settings
from jpkconvert.sheets import default_readers


class TestHealthEndpoint:
    """Test the /api/health endpoint."""

    def test_health_check_returns_ok_status(self, test_client):
        response = test_client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "jpk-convert"

    def test_health_check_includes_registry_counts(self, test_client):
        """Test that health check reports what the pipeline was built with."""
        config = test_client.get("/api/health").json()["config"]
        assert config["catalogs"] == 3
        assert config["profiles"] == 3
        assert config["decimal_places"] == settings.decimal_places


class TestCatalogEndpoints:
    """Test catalog and profile listing."""

    def test_list_catalogs(self, test_client):
        response = test_client.get("/api/catalogs")

        assert response.status_code == 200
        by_key = {(c["document_type"], c["subtype"]): c for c in response.json()}
        assert set(by_key) == {("JPK_VDEK", "SprzedazWiersz"), ("JPK_FA", "Faktura"), ("JPK_MAG", "WZ")}
        assert "P_15" in by_key[("JPK_FA", "Faktura")]["required_fields"]

    def test_get_catalog(self, test_client):
        response = test_client.get("/api/catalogs/JPK_VDEK/SprzedazWiersz")

        assert response.status_code == 200
        fields = {f["name"]: f for f in response.json()["fields"]}
        assert fields["NrKontrahenta"]["type"] == "nip"
        assert "nip" in fields["NrKontrahenta"]["synonyms"]

    def test_get_unknown_catalog(self, test_client):
        response = test_client.get("/api/catalogs/JPK_XYZ/Nope")
        assert response.status_code == 404
        assert "JPK_XYZ.Nope" in response.json()["detail"]

    def test_list_profiles(self, test_client):
        response = test_client.get("/api/profiles")

        assert response.status_code == 200
        ids = {p["id"] for p in response.json()}
        assert "ESO_JPK_MAG_WZ" in ids


class TestAutoMapEndpoint:
    def test_automap(self, test_client):
        response = test_client.post(
            "/api/automap",
            json={
                "document_type": "JPK_VDEK",
                "subtype": "SprzedazWiersz",
                "sheet": {
                    "headers": ["nip", "data_wystawienia"],
                    "rows": [{"index": 0, "cells": ["5260250274", "2026-01-15"]}],
                },
            },
        )

        assert response.status_code == 200
        mappings = response.json()["mappings"]
        assert mappings[0]["target_field"] == "NrKontrahenta"
        assert mappings[0]["method"] == "synonym"
        assert mappings[1]["target_field"] == "DataWystawienia"

    def test_automap_unknown_catalog(self, test_client):
        response = test_client.post(
            "/api/automap",
            json={"document_type": "X", "subtype": "Y", "sheet": {"rows": []}},
        )
        assert response.status_code == 404


class TestConvertEndpoints:
    """Test conversion through the API."""

    def test_convert_sheet(self, test_client):
        response = test_client.post(
            "/api/convert",
            json={
                "document_type": "JPK_VDEK",
                "subtype": "SprzedazWiersz",
                "sheet": {
                    "headers": ["nr_faktury", "data wystawienia", "netto_23"],
                    "rows": [{"index": 0, "cells": ["FV/001", "15.01.2020", "100,50"]}],
                },
                "transform_options": {"decimal_places": 2, "allow_future_dates": False},
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["mapping_source"] == "auto"
        assert data["transformed_rows"][0]["values"] == {
            "DowodSprzedazy": "FV/001",
            "DataWystawienia": "2020-01-15",
            "K_10": "100.50",
        }

    def test_convert_with_custom_mapping(self, test_client):
        response = test_client.post(
            "/api/convert",
            json={
                "document_type": "JPK_VDEK",
                "subtype": "SprzedazWiersz",
                "sheet": {"rows": [{"index": 0, "cells": ["x", "FV/9"]}]},
                "custom_mapping": {
                    "mappings": [
                        {"source_column": 1, "target_field": "DowodSprzedazy",
                         "confidence": 1.0, "method": "manual"}
                    ]
                },
                "skip_validation": True,
            },
        )

        data = response.json()
        assert data["mapping_source"] == "custom"
        assert data["transformed_rows"][0]["values"] == {"DowodSprzedazy": "FV/9"}
        assert all(i["stage"] != "validate" for i in data["issues"])

    def test_convert_empty_sheet_reports_error(self, test_client):
        response = test_client.post(
            "/api/convert",
            json={"document_type": "JPK_FA", "subtype": "Faktura", "sheet": {"rows": []}},
        )

        assert response.status_code == 200
        issues = response.json()["issues"]
        assert issues[0]["severity"] == "error"
        assert issues[0]["stage"] == "parse"

    def test_convert_file(self, test_client):
        body = "PLN;15.01.2020;FV/1\n".encode("utf-8")

        response = test_client.post(
            "/api/convert/file",
            params={
                "filename": "faktury.csv",
                "document_type": "JPK_FA",
                "subtype": "Faktura",
                "system": "NAMOS",
            },
            content=body,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["mapping_source"] == "profile"
        assert data["transformed_rows"][0]["values"]["P_1"] == "2020-01-15"

    def test_convert_file_too_large(self, test_client, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_bytes", 4)

        response = test_client.post(
            "/api/convert/file",
            params={"filename": "x.csv", "document_type": "JPK_FA", "subtype": "Faktura"},
            content=b"a;b;c;d\n",
        )

        assert response.status_code == 413


class TestValueEndpoints:
    def test_transform(self, test_client):
        response = test_client.post("/api/transform", json={"value": "1 234,5", "type": "decimal"})

        assert response.status_code == 200
        assert response.json() == {"value": "1234.50", "changed": True, "warning": None}

    def test_transform_with_options(self, test_client):
        response = test_client.post(
            "/api/transform",
            json={"value": "1,23456", "type": "decimal", "options": {"decimal_places": 4}},
        )
        assert response.json()["value"] == "1.2346"

    def test_nip_valid(self, test_client):
        response = test_client.post("/api/nip/validate", json={"nip": "PL 526 025 02 74"})

        assert response.status_code == 200
        assert response.json() == {
            "nip": "PL 526 025 02 74",
            "valid": True,
            "formatted": "526-025-02-74",
        }

    def test_nip_invalid(self, test_client):
        data = test_client.post("/api/nip/validate", json={"nip": "5260250275"}).json()
        assert data["valid"] is False
        assert data["formatted"] is None


class TestBuildPipeline:
    """Test the bundled pipeline factory."""

    def test_uses_given_readers(self):
        readers = default_readers(header=False)
        pipeline = build_pipeline(readers=readers)
        assert pipeline.readers is readers

    def test_default_readers(self):
        pipeline = build_pipeline()
        assert pipeline.readers is not None
        assert pipeline.catalogs.get("JPK_VDEK", "SprzedazWiersz")
