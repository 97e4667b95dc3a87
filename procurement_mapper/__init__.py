"""
Procurement Mapper — CSV ingestion for the procurement savings dashboard.

Reads the loosely structured export of a human-edited Google Sheet,
locates the procurement fields among whatever headers the sheet currently
has, and produces typed records for the dashboard.

Bad cells never abort a parse: they fall back to documented defaults and
are reported by the validation layer instead.
"""

__version__ = "1.0.0"
__author__ = "Procurement Dashboard Team"

from procurement_mapper.pipeline import ProcurementSheetPipeline  # noqa: F401
from procurement_mapper.schema import EmptyInputError, ProcurementRecord  # noqa: F401
