"""
Unit tests for the Validator.
"""

from __future__ import annotations

from typing import List

import pytest

from procurement_mapper.column_resolver import ColumnResolver
from procurement_mapper.config import ValidationConfig
from procurement_mapper.schema import ProcurementRecord, RawRow
from procurement_mapper.validator import ValidationReport, Validator

FULL_HEADER = [
    "Sr. No",
    "Manager",
    "Member",
    "Group Category",
    "No of part codes",
    "Average Spent",
    "Target Savings",
    "Achieved Savings",
    "New Vendor-1",
]


def _validate(
    validator: Validator,
    headers: List[str],
    data_rows: List[RawRow],
    records: List[ProcurementRecord],
    **kwargs,
) -> ValidationReport:
    resolver = ColumnResolver()
    return validator.validate(
        resolver.build_column_map(headers),
        resolver.find_vendor_columns(headers),
        data_rows,
        records,
        **kwargs,
    )


@pytest.fixture
def validator() -> Validator:
    return Validator(config=ValidationConfig())


@pytest.fixture
def strict_validator() -> Validator:
    return Validator(config=ValidationConfig(
        required_fields=["manager", "avgSpent"],
        error_on_duplicate=True,
    ))


# ======================================================================
# Field resolution
# ======================================================================

class TestFields:
    def test_complete_sheet_is_clean(self, validator: Validator) -> None:
        row = ["1", "G", "M", "C", "1", "2", "20%", "10%", "Eaton"]
        report = _validate(validator, FULL_HEADER, [row], [ProcurementRecord(sr_no="1")])
        assert report.is_valid
        assert report.warnings == []

    def test_unresolved_field_is_warning(self, validator: Validator) -> None:
        report = _validate(validator, ["Sr. No", "Manager", "Vendor"], [], [])
        assert report.is_valid
        assert any("avgSpent" in w for w in report.warnings)

    def test_required_field_missing_is_error(self, strict_validator: Validator) -> None:
        report = _validate(strict_validator, ["Sr. No", "Manager", "Vendor"], [], [])
        assert not report.is_valid
        assert any("avgSpent" in e for e in report.errors)
        assert not any("manager" in e for e in report.errors)

    def test_unknown_required_field(self) -> None:
        v = Validator(config=ValidationConfig(required_fields=["budget"]))
        report = _validate(v, FULL_HEADER, [], [])
        assert any("budget" in e for e in report.errors)

    def test_required_field_by_enum_name(self) -> None:
        v = Validator(config=ValidationConfig(required_fields=["AVG_SPENT"]))
        report = _validate(v, ["Sr. No"], [], [])
        assert any("avgSpent" in e for e in report.errors)


# ======================================================================
# Layout
# ======================================================================

class TestLayout:
    def test_missing_vendor_columns(self, validator: Validator) -> None:
        report = _validate(validator, FULL_HEADER[:-1], [], [])
        assert any("vendor" in w.lower() for w in report.warnings)

    def test_ragged_rows(self, validator: Validator) -> None:
        rows = [["1", "G"], ["2"] + [""] * 8, ["3"] + [""] * 10]
        report = _validate(validator, FULL_HEADER, rows, [])
        ragged = [w for w in report.warnings if "do not have" in w]
        assert len(ragged) == 1
        assert ragged[0].startswith("2 row(s)")


# ======================================================================
# Records
# ======================================================================

class TestRecords:
    def test_duplicate_sr_no_warning(self, validator: Validator) -> None:
        records = [ProcurementRecord(sr_no="1"), ProcurementRecord(sr_no="1")]
        report = _validate(validator, FULL_HEADER, [], records)
        assert report.is_valid
        assert any("Duplicate" in w for w in report.warnings)

    def test_duplicate_sr_no_error(self, strict_validator: Validator) -> None:
        records = [ProcurementRecord(sr_no="1"), ProcurementRecord(sr_no="1")]
        report = _validate(strict_validator, FULL_HEADER, [], records)
        assert any("Duplicate" in e for e in report.errors)

    def test_percentage_out_of_range(self, validator: Validator) -> None:
        records = [
            ProcurementRecord(sr_no="1", target_savings=120.0),
            ProcurementRecord(sr_no="2", achieved_savings=-3.0),
        ]
        report = _validate(validator, FULL_HEADER, [], records)
        out_of_range = [w for w in report.warnings if "outside" in w]
        assert len(out_of_range) == 2

    def test_coercion_summary(self, validator: Validator) -> None:
        report = _validate(
            validator, FULL_HEADER, [], [], coercion_warnings=["a", "b"]
        )
        assert any(w.startswith("2 numeric cell(s)") for w in report.warnings)
