"""
Tests for the Flask API.
"""

from __future__ import annotations

from io import BytesIO

import openpyxl
import pytest

import app as app_module
from procurement_mapper.sheet_source import SheetFetchError


@pytest.fixture
def client():
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as client:
        yield client


@pytest.fixture
def fake_sheet(monkeypatch: pytest.MonkeyPatch, sheet_csv: str):
    def fake_fetch(sheet_id, sheet_name, timeout):
        return sheet_csv

    monkeypatch.setattr("procurement_mapper.pipeline.fetch_csv", fake_fetch)


# ======================================================================
# Health
# ======================================================================

class TestHealth:
    def test_health(self, client) -> None:
        resp = client.get("/api/health")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "ok"
        assert "sheet_configured" in body


# ======================================================================
# Parse
# ======================================================================

class TestParse:
    def test_raw_text(self, client, sheet_csv: str) -> None:
        resp = client.post("/api/procurement/parse", data=sheet_csv, content_type="text/csv")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        assert len(body["records"]) == 3
        assert body["records"][2]["vendors"] == ["POLYVION CABLES, Noida", "Havells"]
        assert body["summary"]["totals"]["categories"] == 3
        assert body["vendor_columns"] == [8, 9, 10]

    def test_json_body(self, client, sheet_csv: str) -> None:
        resp = client.post("/api/procurement/parse", json={"csv": sheet_csv})
        assert resp.status_code == 200
        assert resp.get_json()["records"][0]["srNo"] == "1"

    def test_json_without_csv(self, client) -> None:
        resp = client.post("/api/procurement/parse", json={"text": "x"})
        assert resp.status_code == 400
        assert resp.get_json()["success"] is False

    def test_json_list_body(self, client) -> None:
        resp = client.post("/api/procurement/parse", json=[1, 2])
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["success"] is False
        assert "object" in body["error"]

    def test_malformed_json(self, client) -> None:
        resp = client.post(
            "/api/procurement/parse", data="{not json", content_type="application/json"
        )
        assert resp.status_code == 400

    def test_empty_body(self, client) -> None:
        resp = client.post("/api/procurement/parse", data="   ", content_type="text/csv")
        assert resp.status_code == 400

    def test_header_only(self, client) -> None:
        resp = client.post(
            "/api/procurement/parse", data="Sr. No,Manager\n", content_type="text/csv"
        )
        assert resp.status_code == 422
        body = resp.get_json()
        assert body["records"] == []
        assert "No data rows" in body["error"]

    def test_missing_required_fields_reported(self, client) -> None:
        resp = client.post(
            "/api/procurement/parse", data="Sr. No,Vendor\n1,ABB\n", content_type="text/csv"
        )
        body = resp.get_json()
        assert resp.status_code == 200
        assert body["success"] is False
        assert any("manager" in e for e in body["errors"])


# ======================================================================
# Sheet fetch
# ======================================================================

class TestFetch:
    def test_fetch(self, client, fake_sheet) -> None:
        resp = client.get("/api/procurement")
        assert resp.status_code == 200
        assert len(resp.get_json()["records"]) == 3

    def test_fetch_failure(self, client, monkeypatch: pytest.MonkeyPatch) -> None:
        def failing_fetch(sheet_id, sheet_name, timeout):
            raise SheetFetchError("Failed to fetch sheet 'Sheet1': timed out")

        monkeypatch.setattr("procurement_mapper.pipeline.fetch_csv", failing_fetch)
        resp = client.get("/api/procurement")
        assert resp.status_code == 502
        assert "timed out" in resp.get_json()["error"]

    def test_empty_sheet(self, client, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            "procurement_mapper.pipeline.fetch_csv", lambda *a, **k: "Sr. No\n"
        )
        assert client.get("/api/procurement").status_code == 422

    def test_unconfigured_sheet(self, client, monkeypatch: pytest.MonkeyPatch) -> None:
        def unconfigured(sheet_id, sheet_name, timeout):
            raise ValueError("sheet_id is required")

        monkeypatch.setattr("procurement_mapper.pipeline.fetch_csv", unconfigured)
        resp = client.get("/api/procurement")
        assert resp.status_code == 400


# ======================================================================
# Export
# ======================================================================

class TestExport:
    def test_export_workbook(self, client, fake_sheet) -> None:
        resp = client.get("/api/procurement/export")
        assert resp.status_code == 200
        assert "procurement_data.xlsx" in resp.headers["Content-Disposition"]
        ws = openpyxl.load_workbook(BytesIO(resp.data)).active
        assert ws["A1"].value == "Sr. No"
        assert ws["D4"].value == "Cables & Wires"
        assert ws.max_row == 4

    def test_export_fetch_failure(self, client, monkeypatch: pytest.MonkeyPatch) -> None:
        def failing_fetch(sheet_id, sheet_name, timeout):
            raise SheetFetchError("boom")

        monkeypatch.setattr("procurement_mapper.pipeline.fetch_csv", failing_fetch)
        assert client.get("/api/procurement/export").status_code == 502

    def test_export_write_failure_is_json(
        self, client, fake_sheet, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def broken_write(records, target, sheet_name="Sheet1"):
            raise OSError("disk full")

        monkeypatch.setattr(app_module, "write_records", broken_write)
        resp = client.get("/api/procurement/export")
        assert resp.status_code == 500
        body = resp.get_json()
        assert body["success"] is False
        assert "workbook" in body["error"]

    def test_export_unexpected_parse_error_is_json(
        self, client, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def broken_fetch(sheet_id, sheet_name, timeout):
            raise KeyError("sheet")

        monkeypatch.setattr("procurement_mapper.pipeline.fetch_csv", broken_fetch)
        resp = client.get("/api/procurement/export")
        assert resp.status_code == 500
        assert resp.get_json()["success"] is False
