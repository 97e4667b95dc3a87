"""
Workbook reader / writer.

Procurement sheets are sometimes shared as ``.xlsx`` downloads instead of
CSV exports.  ``read_rows`` turns a worksheet into the same string rows the
tokenizer produces, so the Record Mapper handles both.  ``write_records``
writes records back out in the legacy sheet layout.

Cell conversion when reading:
- empty cells become ``""``
- integral numbers lose their ``.0`` (``254.0`` → ``"254"``)
- cells with a percent number format are rendered as percentages
  (``0.2`` → ``"20%"``), matching what the CSV export shows
- text is trimmed
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import IO, Any, List, Optional, Sequence, Union

import openpyxl
from openpyxl.utils import get_column_letter

from procurement_mapper.logging_setup import get_logger
from procurement_mapper.schema import (
    SHEET_HEADERS,
    VENDOR_HEADER_TEMPLATE,
    ProcurementField,
    ProcurementRecord,
    RawRow,
)

logger = get_logger("excel_io")

# Column widths of the legacy workbook, in characters.
_FIELD_WIDTHS = {
    ProcurementField.SR_NO: 10,
    ProcurementField.MANAGER: 20,
    ProcurementField.MEMBER: 15,
    ProcurementField.GROUP_CATEGORY: 25,
    ProcurementField.NO_OF_PART_CODES: 18,
    ProcurementField.AVG_SPENT: 35,
    ProcurementField.TARGET_SAVINGS: 15,
    ProcurementField.ACHIEVED_SAVINGS: 18,
}
_VENDOR_WIDTH = 30


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _cell_text(value: Any, number_format: str = "General") -> str:
    """Render one cell value as the CSV export would show it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        if "%" in (number_format or ""):
            return f"{_format_number(round(value * 100, 10))}%"
        return _format_number(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value).strip()


def read_rows(path: Union[str, Path], sheet_name: Optional[str] = None) -> List[RawRow]:
    """Read one worksheet into string rows.

    Parameters
    ----------
    path:
        ``.xlsx`` / ``.xlsm`` workbook.
    sheet_name:
        Worksheet to read; the active sheet when omitted.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Workbook not found: {path}")

    wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        if sheet_name is not None:
            if sheet_name not in wb.sheetnames:
                raise ValueError(
                    f"Sheet {sheet_name!r} not in workbook; "
                    f"available: {', '.join(wb.sheetnames)}"
                )
            ws = wb[sheet_name]
        else:
            ws = wb.active

        rows: List[RawRow] = []
        header_width = 0
        for cells in ws.iter_rows():
            row = [
                _cell_text(c.value, getattr(c, "number_format", "General"))
                for c in cells
            ]
            # Formatting can widen the used range; empty cells past the
            # header are not part of the table.
            while len(row) > header_width and not row[-1]:
                row.pop()
            if not row:
                continue
            if not rows:
                header_width = len(row)
            rows.append(row)
    finally:
        wb.close()

    logger.info("Read %d rows from %s [%s]", len(rows), path.name, sheet_name or "active")
    return rows


def write_records(
    records: Sequence[ProcurementRecord],
    target: Union[str, Path, IO[bytes]],
    sheet_name: str = "Sheet1",
) -> None:
    """Write *records* to an ``.xlsx`` file path or binary stream."""
    vendor_slots = max([len(r.vendors) for r in records] + [1])

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = sheet_name

    header = [SHEET_HEADERS[f] for f in ProcurementField]
    header += [VENDOR_HEADER_TEMPLATE.format(n=n) for n in range(1, vendor_slots + 1)]
    ws.append(header)

    for record in records:
        vendors = list(record.vendors) + [None] * (vendor_slots - len(record.vendors))
        ws.append([
            record.sr_no,
            record.manager,
            record.member,
            record.group_category,
            record.no_of_part_codes,
            record.avg_spent,
            f"{_format_number(record.target_savings)}%",
            f"{_format_number(record.achieved_savings)}%",
            *vendors,
        ])

    widths = [_FIELD_WIDTHS[f] for f in ProcurementField] + [_VENDOR_WIDTH] * vendor_slots
    for i, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(i)].width = width

    if isinstance(target, (str, Path)):
        target = Path(target)
        target.parent.mkdir(parents=True, exist_ok=True)
    wb.save(target)
    logger.info("Wrote %d records (%d vendor columns)", len(records), vendor_slots)
