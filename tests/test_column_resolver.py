"""
Unit tests for header-to-field column resolution.
"""

from __future__ import annotations

import pytest

from procurement_mapper.column_resolver import (
    ColumnResolver,
    find_column_indices,
    resolve_column,
)
from procurement_mapper.config import MatchingConfig
from procurement_mapper.schema import (
    FIELD_SEARCH_TERMS,
    UNRESOLVED,
    ProcurementField as F,
)

SHEET_HEADERS = [
    "Sr. No",
    "Manager",
    "Member",
    "Group Category",
    "No of part codes",
    "Average Spent per Year (INR Lakhs)",
    "Target Savings",
    "Achieved Savings",
    "New Vendor-1",
    "New Vendor-2",
]


@pytest.fixture
def resolver() -> ColumnResolver:
    return ColumnResolver(MatchingConfig())


# ======================================================================
# resolve_column
# ======================================================================

class TestResolveColumn:
    def test_specific_term_beats_generic(self) -> None:
        headers = ["Sr. No", "Manager", "Team Member", "Group", "No of part codes"]
        assert resolve_column(headers, FIELD_SEARCH_TERMS[F.SR_NO]) == 0
        assert resolve_column(headers, FIELD_SEARCH_TERMS[F.MEMBER]) == 2

    def test_earlier_term_beats_leftmost_column(self) -> None:
        headers = ["Category", "Group Category"]
        assert resolve_column(headers, FIELD_SEARCH_TERMS[F.GROUP_CATEGORY]) == 1

    def test_leftmost_column_wins_for_same_term(self) -> None:
        assert resolve_column(["Target Q1", "Target Q2"], ["target"]) == 0

    def test_case_insensitive(self) -> None:
        assert resolve_column(["ACHIEVED SAVINGS"], ["achieved savings"]) == 0

    def test_generic_term_matches_unrelated_header(self) -> None:
        # "no" is a plain substring test, so "Phone No" satisfies srNo.
        assert resolve_column(["Name", "Phone No"], FIELD_SEARCH_TERMS[F.SR_NO]) == 1

    def test_unresolved(self) -> None:
        assert resolve_column(["Alpha", "Beta"], ["manager"]) == UNRESOLVED

    def test_empty_headers(self) -> None:
        assert resolve_column([], ["manager"]) == UNRESOLVED

    def test_exact_match_mode(self) -> None:
        headers = ["Manager Name", "manager"]
        assert resolve_column(headers, ["manager"], partial_match=False) == 1
        assert resolve_column(headers, ["manager"]) == 0


# ======================================================================
# Vendor columns
# ======================================================================

class TestVendorColumns:
    def test_all_vendor_headers_found(self) -> None:
        headers = ["Sr. No", "New Vendor-1", "vendor 2", "Notes", "VENDOR"]
        assert find_column_indices(headers, "vendor") == (1, 2, 4)

    def test_no_vendor_headers(self) -> None:
        assert find_column_indices(["a", "b"], "vendor") == ()

    def test_custom_pattern(self) -> None:
        resolver = ColumnResolver(MatchingConfig(vendor_pattern="supplier"))
        assert resolver.find_vendor_columns(["Supplier A", "Vendor B"]) == (0,)


# ======================================================================
# ColumnMap construction
# ======================================================================

class TestBuildColumnMap:
    def test_legacy_sheet(self, resolver: ColumnResolver) -> None:
        cmap = resolver.build_column_map(SHEET_HEADERS)
        assert cmap.index_of(F.SR_NO) == 0
        assert cmap.index_of(F.MANAGER) == 1
        assert cmap.index_of(F.MEMBER) == 2
        assert cmap.index_of(F.GROUP_CATEGORY) == 3
        assert cmap.index_of(F.NO_OF_PART_CODES) == 4
        assert cmap.index_of(F.AVG_SPENT) == 5
        assert cmap.index_of(F.TARGET_SAVINGS) == 6
        assert cmap.index_of(F.ACHIEVED_SAVINGS) == 7
        assert cmap.unresolved == []
        assert resolver.find_vendor_columns(SHEET_HEADERS) == (8, 9)

    def test_unresolved_fields_listed(self, resolver: ColumnResolver) -> None:
        cmap = resolver.build_column_map(["Manager", "Member"])
        assert not cmap.is_resolved(F.AVG_SPENT)
        assert F.AVG_SPENT in cmap.unresolved
        assert F.MANAGER not in cmap.unresolved

    def test_column_map_is_read_only(self, resolver: ColumnResolver) -> None:
        cmap = resolver.build_column_map(SHEET_HEADERS)
        with pytest.raises(TypeError):
            cmap.indices[F.MANAGER] = 5  # type: ignore[index]

    def test_to_dict_reports_header(self, resolver: ColumnResolver) -> None:
        data = resolver.build_column_map(SHEET_HEADERS).to_dict()
        assert data["member"] == {"index": 2, "header": "Member"}

    def test_to_dict_unresolved_header_is_none(self, resolver: ColumnResolver) -> None:
        data = resolver.build_column_map(["Manager"]).to_dict()
        assert data["avgSpent"] == {"index": UNRESOLVED, "header": None}
