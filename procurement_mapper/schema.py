"""
Procurement sheet schema and data models.

Defines the semantic fields a procurement sheet is mapped into, the ordered
header search terms used to locate them, and the typed structures carried
through the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple


RawRow = List[str]

# Column index used when no header matched a field.
UNRESOLVED = -1


class EmptyInputError(ValueError):
    """Raised when a sheet has no data rows below its header."""


# ---------------------------------------------------------------------------
# Semantic fields
# ---------------------------------------------------------------------------

class ProcurementField(str, Enum):
    """
    Every scalar field a procurement row can be mapped to.

    The ``.value`` is the key used in serialised output.
    """

    SR_NO = "srNo"
    MANAGER = "manager"
    MEMBER = "member"
    GROUP_CATEGORY = "groupCategory"
    NO_OF_PART_CODES = "noOfPartCodes"
    AVG_SPENT = "avgSpent"
    TARGET_SAVINGS = "targetSavings"
    ACHIEVED_SAVINGS = "achievedSavings"


# Ordered most-specific first.  Matching is substring based, so a broad
# term such as "no" must stay behind "sr. no" or it would claim other
# headers first.
FIELD_SEARCH_TERMS: Mapping[ProcurementField, Tuple[str, ...]] = MappingProxyType({
    ProcurementField.SR_NO: ("sr. no", "sr no", "sno", "no"),
    ProcurementField.MANAGER: ("manager",),
    ProcurementField.MEMBER: ("member", "team member", "assignee"),
    ProcurementField.GROUP_CATEGORY: ("group category", "group", "category"),
    ProcurementField.NO_OF_PART_CODES: ("no of part codes", "part codes", "codes"),
    ProcurementField.AVG_SPENT: ("average spent", "avg spent", "average spend"),
    ProcurementField.TARGET_SAVINGS: ("target savings", "target"),
    ProcurementField.ACHIEVED_SAVINGS: ("achieved savings", "achieved", "realised"),
})

TEXT_FIELDS = frozenset({
    ProcurementField.SR_NO,
    ProcurementField.MANAGER,
    ProcurementField.MEMBER,
    ProcurementField.GROUP_CATEGORY,
})

PERCENT_FIELDS = frozenset({
    ProcurementField.TARGET_SAVINGS,
    ProcurementField.ACHIEVED_SAVINGS,
})

# Header labels of the legacy sheet layout, used when writing workbooks.
SHEET_HEADERS: Mapping[ProcurementField, str] = MappingProxyType({
    ProcurementField.SR_NO: "Sr. No",
    ProcurementField.MANAGER: "Manager",
    ProcurementField.MEMBER: "Member",
    ProcurementField.GROUP_CATEGORY: "Group Category",
    ProcurementField.NO_OF_PART_CODES: "No of part codes",
    ProcurementField.AVG_SPENT: "Average Spent per Year (INR Lakhs)",
    ProcurementField.TARGET_SAVINGS: "Target Savings",
    ProcurementField.ACHIEVED_SAVINGS: "Achieved Savings",
})

VENDOR_HEADER_TEMPLATE = "New Vendor-{n}"


def field_lookup(name: str) -> Optional[ProcurementField]:
    """Look a field up by its key or enum name, ignoring case."""
    _lower = name.strip().lower()
    for f in ProcurementField:
        if f.value.lower() == _lower or f.name.lower() == _lower:
            return f
    return None


# ---------------------------------------------------------------------------
# Pipeline data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ColumnMap:
    """Resolved field → column index mapping for one sheet.

    Built once from the header row and shared read-only across every
    data row.  Fields without a matching header hold ``UNRESOLVED``.
    """

    indices: Mapping[ProcurementField, int]
    headers: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        complete = {f: self.indices.get(f, UNRESOLVED) for f in ProcurementField}
        object.__setattr__(self, "indices", MappingProxyType(complete))
        object.__setattr__(self, "headers", tuple(self.headers))

    def index_of(self, field_: ProcurementField) -> int:
        return self.indices[field_]

    def is_resolved(self, field_: ProcurementField) -> bool:
        return self.indices[field_] != UNRESOLVED

    @property
    def unresolved(self) -> List[ProcurementField]:
        return [f for f in ProcurementField if not self.is_resolved(f)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            f.value: {
                "index": idx,
                "header": self.headers[idx] if 0 <= idx < len(self.headers) else None,
            }
            for f, idx in self.indices.items()
        }


@dataclass(frozen=True)
class ProcurementRecord:
    """One typed row of the procurement sheet."""

    sr_no: str = ""
    manager: str = ""
    member: str = ""
    group_category: str = ""
    no_of_part_codes: int = 0
    avg_spent: float = 0.0
    target_savings: float = 0.0
    achieved_savings: float = 0.0
    vendors: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "vendors", tuple(self.vendors))

    def to_dict(self) -> Dict[str, Any]:
        return {
            ProcurementField.SR_NO.value: self.sr_no,
            ProcurementField.MANAGER.value: self.manager,
            ProcurementField.MEMBER.value: self.member,
            ProcurementField.GROUP_CATEGORY.value: self.group_category,
            ProcurementField.NO_OF_PART_CODES.value: self.no_of_part_codes,
            ProcurementField.AVG_SPENT.value: self.avg_spent,
            ProcurementField.TARGET_SAVINGS.value: self.target_savings,
            ProcurementField.ACHIEVED_SAVINGS.value: self.achieved_savings,
            "vendors": list(self.vendors),
        }


@dataclass
class HeaderSuggestion:
    """A near-miss header offered for a field that did not resolve."""

    field_key: str
    header: str
    column: int
    score: float  # 0–100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field_key,
            "header": self.header,
            "column": self.column,
            "score": round(self.score, 2),
        }


@dataclass
class MappedSheet:
    """Records mapped from one sheet, with the layout they were read through."""

    column_map: ColumnMap
    vendor_columns: Tuple[int, ...]
    data_rows: List[RawRow]
    records: List[ProcurementRecord] = field(default_factory=list)
    coercion_warnings: List[str] = field(default_factory=list)


@dataclass
class PipelineOutput:
    """Aggregate result of one sheet parse."""

    records: list[ProcurementRecord] = field(default_factory=list)
    column_map: Optional[ColumnMap] = None
    vendor_columns: Tuple[int, ...] = ()
    suggestions: list[HeaderSuggestion] = field(default_factory=list)
    validation_errors: list[str] = field(default_factory=list)
    validation_warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.validation_errors) == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "records": [r.to_dict() for r in self.records],
            "columns": self.column_map.to_dict() if self.column_map else {},
            "vendor_columns": list(self.vendor_columns),
            "suggestions": [s.to_dict() for s in self.suggestions],
            "validation_errors": self.validation_errors,
            "validation_warnings": self.validation_warnings,
        }
