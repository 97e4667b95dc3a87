"""
Header Suggestion Layer.

Column resolution is deliberately literal: a field whose search terms do not
appear in any header stays unresolved.  When that happens this layer uses
``rapidfuzz`` to find the header that *looks* closest to the field's search
terms, so the caller can tell the sheet owner which column was probably
meant (e.g. ``"Acheived Saving"`` for *achievedSavings*).

Suggestions are advisory only and never change the ``ColumnMap``.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from rapidfuzz import fuzz, process

from procurement_mapper.config import MatchingConfig
from procurement_mapper.logging_setup import get_logger
from procurement_mapper.schema import (
    FIELD_SEARCH_TERMS,
    ColumnMap,
    HeaderSuggestion,
    ProcurementField,
)

logger = get_logger("fuzzy_matcher")


class FuzzyMatcher:
    """Score headers against a field's search terms.

    Parameters
    ----------
    config:
        ``suggestion_threshold`` is the minimum score (0–100) to report.
    """

    def __init__(self, config: MatchingConfig) -> None:
        self._config = config

    def suggest(
        self,
        field_: ProcurementField,
        headers: Sequence[str],
        exclude: Sequence[int] = (),
    ) -> Optional[HeaderSuggestion]:
        """Best header for *field_*, or ``None`` if nothing qualifies.

        Columns listed in *exclude* (already claimed by other fields) are
        not considered.
        """
        choices = {
            i: str(h).lower()
            for i, h in enumerate(headers)
            if str(h).strip() and i not in exclude
        }
        if not choices:
            return None

        best: Optional[HeaderSuggestion] = None
        for term in FIELD_SEARCH_TERMS[field_]:
            result = process.extractOne(
                term,
                choices,
                scorer=fuzz.token_set_ratio,
                score_cutoff=self._config.suggestion_threshold,
            )
            if result is None:
                continue
            _, score, column = result
            if best is None or score > best.score:
                best = HeaderSuggestion(
                    field_key=field_.value,
                    header=str(headers[column]),
                    column=column,
                    score=score,
                )

        if best is None:
            logger.debug("No header suggestion for %r", field_.value)
        else:
            logger.info(
                "Suggestion for unresolved %r: column %d %r (score=%.1f)",
                best.field_key,
                best.column,
                best.header,
                best.score,
            )
        return best

    def suggest_unresolved(self, column_map: ColumnMap) -> List[HeaderSuggestion]:
        """Suggest a header for every unresolved field of *column_map*."""
        claimed = [idx for idx in column_map.indices.values() if idx >= 0]
        suggestions: List[HeaderSuggestion] = []
        for field_ in column_map.unresolved:
            candidate = self.suggest(field_, column_map.headers, exclude=claimed)
            if candidate is not None:
                suggestions.append(candidate)
        return suggestions
