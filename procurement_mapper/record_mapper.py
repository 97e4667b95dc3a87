"""
Record Mapper.

Turns tokenized rows (first row = header) into ``ProcurementRecord``s:

    header  →  ColumnMap + vendor columns  →  one record per data row

Per-row problems never raise.  Unresolved or out-of-range columns yield the
field default and unparseable numbers become 0.  The only failure surfaced
to the caller is ``EmptyInputError`` for input without data rows.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from procurement_mapper.column_resolver import ColumnResolver
from procurement_mapper.config import MatchingConfig
from procurement_mapper.logging_setup import get_logger
from procurement_mapper.normalizer import ValueNormalizer
from procurement_mapper.schema import (
    ColumnMap,
    EmptyInputError,
    MappedSheet,
    ProcurementField,
    ProcurementRecord,
    RawRow,
)

logger = get_logger("record_mapper")


class RecordMapper:
    """Maps raw sheet rows to typed procurement records.

    Parameters
    ----------
    config:
        Matching behaviour used to build the column map.
    normalizer:
        Cell-to-number converter; a default instance is created if omitted.
    """

    def __init__(
        self,
        config: Optional[MatchingConfig] = None,
        normalizer: Optional[ValueNormalizer] = None,
    ) -> None:
        self._resolver = ColumnResolver(config)
        self._normalizer = normalizer or ValueNormalizer()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def resolve_layout(self, headers: Sequence[str]) -> Tuple[ColumnMap, Tuple[int, ...]]:
        """Return ``(column_map, vendor_columns)`` for a header row."""
        return (
            self._resolver.build_column_map(headers),
            self._resolver.find_vendor_columns(headers),
        )

    def map_records(self, rows: Sequence[RawRow]) -> List[ProcurementRecord]:
        """Map every data row below the header.

        Raises
        ------
        EmptyInputError
            If fewer than two rows (header + data) are supplied.
        """
        return self.map_sheet(rows).records

    def map_sheet(self, rows: Sequence[RawRow]) -> MappedSheet:
        """Like ``map_records`` but also return the layout and coercion warnings.

        Per-parse state lives only in the returned ``MappedSheet``; the
        mapper itself is never mutated.
        """
        if len(rows) < 2:
            raise EmptyInputError("No data rows found")

        column_map, vendor_columns = self.resolve_layout(rows[0])
        sheet = MappedSheet(
            column_map=column_map,
            vendor_columns=vendor_columns,
            data_rows=list(rows[1:]),
        )
        for row in sheet.data_rows:
            record = self.map_row(row, column_map, vendor_columns, sheet.coercion_warnings)
            if record is not None:
                sheet.records.append(record)

        logger.info(
            "Mapped %d records from %d data rows", len(sheet.records), len(sheet.data_rows)
        )
        return sheet

    def map_row(
        self,
        row: RawRow,
        column_map: ColumnMap,
        vendor_columns: Sequence[int],
        warnings: Optional[List[str]] = None,
    ) -> Optional[ProcurementRecord]:
        """Map one data row, or return ``None`` if its first cell is empty.

        Coercion problems are appended to *warnings* when a list is given.
        """
        if len(row) == 0 or not row[0]:
            return None

        def cell(field_: ProcurementField) -> Optional[str]:
            idx = column_map.index_of(field_)
            if 0 <= idx < len(row):
                return row[idx]
            return None

        no_of_part_codes, w1 = self._normalizer.parse_int(cell(ProcurementField.NO_OF_PART_CODES))
        avg_spent, w2 = self._normalizer.parse_float(cell(ProcurementField.AVG_SPENT))
        target, w3 = self._normalizer.parse_percent(cell(ProcurementField.TARGET_SAVINGS))
        achieved, w4 = self._normalizer.parse_percent(cell(ProcurementField.ACHIEVED_SAVINGS))
        for msg in (*w1, *w2, *w3, *w4):
            if warnings is not None:
                warnings.append(f"Row {row[0]!r}: {msg}")
            logger.debug("Row %r: %s", row[0], msg)

        vendors = []
        for idx in vendor_columns:
            if idx < len(row) and row[idx] and row[idx].strip():
                vendors.append(row[idx].strip())

        return ProcurementRecord(
            sr_no=cell(ProcurementField.SR_NO) or "",
            manager=cell(ProcurementField.MANAGER) or "",
            member=cell(ProcurementField.MEMBER) or "",
            group_category=cell(ProcurementField.GROUP_CATEGORY) or "",
            no_of_part_codes=no_of_part_codes,
            avg_spent=avg_spent,
            target_savings=target,
            achieved_savings=achieved,
            vendors=tuple(vendors),
        )


def map_records(
    rows: Sequence[RawRow], config: Optional[MatchingConfig] = None
) -> List[ProcurementRecord]:
    """Map *rows* with a one-off ``RecordMapper``."""
    return RecordMapper(config).map_records(rows)
