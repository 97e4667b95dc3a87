"""
Value Normalization Layer.

Converts the string cells of a procurement sheet into numbers the way the
dashboard has always read them:

1. Strip leading / trailing whitespace
2. Remove currency symbols and grouping commas (counts and spend only)
3. Remove every ``%`` sign (savings percentages only); ``"20%"`` is 20.0
4. Parse the leading numeric prefix, so ``"254 parts"`` is 254
5. Fall back to 0 when nothing numeric remains

Nothing here raises: every ``parse_*`` method returns ``(value, warnings)``
and every ``to_*`` method returns just the value.
"""

from __future__ import annotations

import math
import re
from typing import Any, Tuple

from procurement_mapper.logging_setup import get_logger

logger = get_logger("normalizer")


class ValueNormalizer:
    """Stateless cell normaliser.  All methods are pure functions."""

    # Currency symbols seen in spend columns
    _CURRENCY_RE = re.compile(r"[₹$€£¥]")

    # Grouping commas: "1,750" and Indian "1,23,456"
    _GROUPING_RE = re.compile(r"(?<=\d),(?=\d)")

    _INT_PREFIX_RE = re.compile(r"^[+-]?\d+")
    _FLOAT_PREFIX_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def parse_int(self, raw: Any) -> Tuple[int, list[str]]:
        """Parse a non-negative count such as *No of part codes*.

        Returns
        -------
        tuple[int, list[str]]
            (parsed_value, list_of_warnings).  ``0`` if parsing fails.
        """
        warnings: list[str] = []
        if isinstance(raw, bool):
            raw = str(raw)
        if isinstance(raw, int):
            value = raw
        elif isinstance(raw, float):
            if not math.isfinite(raw):
                warnings.append(f"Non-finite count {raw!r} replaced with 0")
                return 0, warnings
            value = int(raw)
        else:
            text = self._clean_number(raw)
            m = self._INT_PREFIX_RE.match(text)
            if not m:
                if text:
                    warnings.append(f"Cannot parse integer from: {raw!r}")
                return 0, warnings
            value = int(m.group(0))

        if value < 0:
            warnings.append(f"Negative count {value} replaced with 0")
            return 0, warnings
        return value, warnings

    def parse_float(self, raw: Any) -> Tuple[float, list[str]]:
        """Parse a spend amount such as ``"₹1,750.5"``."""
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return self._parse_float_text(raw, repr(float(raw)))
        return self._parse_float_text(raw, self._clean_number(raw))

    def parse_percent(self, raw: Any) -> Tuple[float, list[str]]:
        """Parse a savings percentage.  ``"20%"`` → ``20.0`` (not ``0.2``)."""
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return self._parse_float_text(raw, repr(float(raw)))
        text = self._as_text(raw).replace("%", "").strip()
        return self._parse_float_text(raw, text)

    def to_int(self, raw: Any) -> int:
        return self.parse_int(raw)[0]

    def to_float(self, raw: Any) -> float:
        return self.parse_float(raw)[0]

    def to_percent(self, raw: Any) -> float:
        return self.parse_percent(raw)[0]

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _as_text(raw: Any) -> str:
        if raw is None:
            return ""
        return str(raw).strip()

    def _clean_number(self, raw: Any) -> str:
        text = self._CURRENCY_RE.sub("", self._as_text(raw)).strip()
        return self._GROUPING_RE.sub("", text)

    def _parse_float_text(self, raw: Any, text: str) -> Tuple[float, list[str]]:
        warnings: list[str] = []
        m = self._FLOAT_PREFIX_RE.match(text)
        if not m:
            if text:
                warnings.append(f"Cannot parse numeric value from: {raw!r}")
                logger.debug("Numeric fallback to 0 for %r", raw)
            return 0.0, warnings
        value = float(m.group(0))
        if not math.isfinite(value):
            warnings.append(f"Non-finite value from: {raw!r}")
            return 0.0, warnings
        return value, warnings
