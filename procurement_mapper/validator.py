"""
Validation Layer.

Post-mapping checks on a parsed sheet, run *before* records are handed to
the dashboard.  Mapping itself never fails on bad cells, so this is where
the sheet owner learns about them.

Checks performed
----------------
1. **Required fields**: configurable field keys that must resolve to a
   column; missing ones produce errors.
2. **Unresolved fields**: any other field without a column is a warning.
3. **Vendor columns**: a sheet without any is a warning.
4. **Ragged rows**: data rows longer or shorter than the header.
5. **Duplicate Sr. No**: warning, or error when ``error_on_duplicate``.
6. **Savings range**: percentages outside ``[0, max_percentage]``.
7. **Coercion failures**: numeric cells that fell back to 0.
"""

from __future__ import annotations

from typing import List, Sequence

from procurement_mapper.config import ValidationConfig
from procurement_mapper.logging_setup import get_logger
from procurement_mapper.schema import (
    ColumnMap,
    ProcurementRecord,
    RawRow,
    field_lookup,
)

logger = get_logger("validator")


class ValidationReport:
    """Accumulates errors and warnings during a validation pass."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)
        logger.error("Validation ERROR: %s", msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)
        logger.warning("Validation WARNING: %s", msg)


class Validator:
    """Validates the layout and records of one parsed sheet.

    Parameters
    ----------
    config:
        Validation thresholds and behaviour flags.
    """

    def __init__(self, config: ValidationConfig) -> None:
        self._config = config

    def validate(
        self,
        column_map: ColumnMap,
        vendor_columns: Sequence[int],
        data_rows: Sequence[RawRow],
        records: Sequence[ProcurementRecord],
        coercion_warnings: Sequence[str] = (),
    ) -> ValidationReport:
        """Run all checks and return a ``ValidationReport``."""
        report = ValidationReport()
        self._check_fields(column_map, report)
        self._check_vendor_columns(vendor_columns, report)
        self._check_row_lengths(column_map, data_rows, report)
        self._check_duplicates(records, report)
        self._check_percentages(records, report)
        if coercion_warnings:
            report.add_warning(
                f"{len(coercion_warnings)} numeric cell(s) could not be parsed "
                f"and defaulted to 0"
            )
        return report

    # ------------------------------------------------------------------ #
    # Individual checks
    # ------------------------------------------------------------------ #

    def _check_fields(self, column_map: ColumnMap, report: ValidationReport) -> None:
        required = set()
        for name in self._config.required_fields:
            field_ = field_lookup(name)
            if field_ is None:
                report.add_error(f"Unknown required field: '{name}'")
                continue
            required.add(field_)

        for field_ in column_map.unresolved:
            if field_ in required:
                report.add_error(f"Required field missing: '{field_.value}'")
            else:
                report.add_warning(f"No column found for '{field_.value}'")

    @staticmethod
    def _check_vendor_columns(
        vendor_columns: Sequence[int], report: ValidationReport
    ) -> None:
        if not vendor_columns:
            report.add_warning("No vendor columns found in header")

    @staticmethod
    def _check_row_lengths(
        column_map: ColumnMap, data_rows: Sequence[RawRow], report: ValidationReport
    ) -> None:
        width = len(column_map.headers)
        ragged: List[str] = [
            row[0] for row in data_rows if row and row[0] and len(row) != width
        ]
        if ragged:
            preview = ", ".join(repr(r) for r in ragged[:5])
            report.add_warning(
                f"{len(ragged)} row(s) do not have {width} cells "
                f"(first: {preview})"
            )

    def _check_duplicates(
        self, records: Sequence[ProcurementRecord], report: ValidationReport
    ) -> None:
        seen: set[str] = set()
        for record in records:
            if not record.sr_no:
                continue
            if record.sr_no in seen:
                msg = f"Duplicate Sr. No '{record.sr_no}'"
                if self._config.error_on_duplicate:
                    report.add_error(msg)
                else:
                    report.add_warning(msg)
            else:
                seen.add(record.sr_no)

    def _check_percentages(
        self, records: Sequence[ProcurementRecord], report: ValidationReport
    ) -> None:
        upper = self._config.max_percentage
        for record in records:
            for label, value in (
                ("target savings", record.target_savings),
                ("achieved savings", record.achieved_savings),
            ):
                if value < 0 or value > upper:
                    report.add_warning(
                        f"Sr. No '{record.sr_no}': {label} {value}% outside 0–{upper:g}%"
                    )
