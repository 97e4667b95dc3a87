"""
Column Resolution Layer.

Locates each semantic field among arbitrarily labelled spreadsheet headers
using the ordered search terms in ``FIELD_SEARCH_TERMS``:

* terms are tried in order, so an earlier term beats a later one even if
  the later one matches a column further left;
* for one term, the leftmost matching header wins;
* matching is case-insensitive substring containment.

Vendor columns are found separately: every header containing the vendor
pattern counts, in column order.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence, Tuple

from procurement_mapper.config import MatchingConfig
from procurement_mapper.logging_setup import get_logger
from procurement_mapper.schema import (
    FIELD_SEARCH_TERMS,
    UNRESOLVED,
    ColumnMap,
    ProcurementField,
)

logger = get_logger("column_resolver")


def resolve_column(
    headers: Sequence[str],
    search_terms: Iterable[str],
    partial_match: bool = True,
) -> int:
    """Return the column index of the first header matching any term.

    Returns ``UNRESOLVED`` when no term matches any header.
    """
    lowered = [str(h).lower() for h in headers]
    for term in search_terms:
        term_lower = term.lower()
        for i, header in enumerate(lowered):
            if partial_match:
                if term_lower in header:
                    return i
            elif header == term_lower:
                return i
    return UNRESOLVED


def find_column_indices(headers: Sequence[str], pattern: str) -> Tuple[int, ...]:
    """Return every column index whose header contains *pattern*."""
    pattern_lower = pattern.lower()
    return tuple(
        i for i, header in enumerate(headers) if pattern_lower in str(header).lower()
    )


class ColumnResolver:
    """Builds the ``ColumnMap`` and vendor column set for a header row.

    Parameters
    ----------
    config:
        Matching behaviour flags.
    search_terms:
        Field → ordered term list.  Defaults to ``FIELD_SEARCH_TERMS``.
    """

    def __init__(
        self,
        config: Optional[MatchingConfig] = None,
        search_terms: Optional[Dict[ProcurementField, Tuple[str, ...]]] = None,
    ) -> None:
        self._config = config or MatchingConfig()
        self._search_terms = dict(search_terms or FIELD_SEARCH_TERMS)

    @property
    def search_terms(self) -> Dict[ProcurementField, Tuple[str, ...]]:
        return dict(self._search_terms)

    def build_column_map(self, headers: Sequence[str]) -> ColumnMap:
        indices: Dict[ProcurementField, int] = {}
        for field_, terms in self._search_terms.items():
            indices[field_] = resolve_column(
                headers, terms, partial_match=self._config.partial_match
            )

        column_map = ColumnMap(indices=indices, headers=tuple(headers))
        logger.info(
            "Column map: %s",
            ", ".join(f"{f.value}={idx}" for f, idx in column_map.indices.items()),
        )
        for field_ in column_map.unresolved:
            logger.warning("No header matched field %r", field_.value)
        return column_map

    def find_vendor_columns(self, headers: Sequence[str]) -> Tuple[int, ...]:
        vendor_columns = find_column_indices(headers, self._config.vendor_pattern)
        logger.info("Vendor columns: %s", list(vendor_columns))
        return vendor_columns
