"""
Configuration module for Procurement Mapper.

All tuneable parameters (tokenizer strategy, matching behaviour, validation
thresholds, sheet location) live here.  Nothing is hard-coded in business
logic modules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional


TOKENIZER_STRATEGIES = ("quote_balanced", "strict")


@dataclass(frozen=True)
class TokenizerConfig:
    """Controls how raw CSV text is split into rows and cells."""

    # "quote_balanced" keeps the legacy line-accumulation heuristic;
    # "strict" uses an RFC 4180 reader.
    strategy: str = "quote_balanced"

    # Extra single-character cell separator honoured outside quotes,
    # e.g. "\t" for sheets pasted from tab-separated sources.
    # quote_balanced only; the csv reader takes a single delimiter.
    secondary_delimiter: Optional[str] = None

    def __post_init__(self) -> None:
        if self.strategy not in TOKENIZER_STRATEGIES:
            raise ValueError(
                f"Unknown tokenizer strategy {self.strategy!r}; "
                f"expected one of {', '.join(TOKENIZER_STRATEGIES)}"
            )
        if self.secondary_delimiter is not None and len(self.secondary_delimiter) != 1:
            raise ValueError("secondary_delimiter must be a single character")
        if self.secondary_delimiter in ('"', ","):
            raise ValueError("secondary_delimiter cannot be a quote or a comma")
        if self.secondary_delimiter is not None and self.strategy == "strict":
            raise ValueError(
                "secondary_delimiter is only supported by the quote_balanced strategy"
            )


@dataclass(frozen=True)
class MatchingConfig:
    """Controls header-to-field resolution."""

    # Substring matching (legacy behaviour).  False requires the whole
    # header to equal a search term, ignoring case.
    partial_match: bool = True

    # Every header containing this substring is a vendor column.
    vendor_pattern: str = "vendor"

    # rapidfuzz score (0–100) a header must reach to be offered as a
    # suggestion for an unresolved field.
    suggestion_threshold: float = 75.0


@dataclass(frozen=True)
class ValidationConfig:
    """Controls the validation layer."""

    # Field keys (e.g. "manager") that *must* resolve to a column.
    # An empty list disables the check.
    required_fields: list[str] = field(default_factory=list)

    # When True, duplicate Sr. No values trigger an error; otherwise a warning.
    error_on_duplicate: bool = False

    # Savings percentages above this value are flagged as implausible.
    max_percentage: float = 100.0


@dataclass(frozen=True)
class SheetConfig:
    """Where the published Google Sheet lives."""

    sheet_id: str = ""
    sheet_name: str = "Sheet1"

    # Seconds to wait for the CSV export.
    timeout: float = 15.0


@dataclass(frozen=True)
class PipelineConfig:
    """Top-level configuration aggregating all sub-configs."""

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    sheet: SheetConfig = field(default_factory=SheetConfig)

    # Logging level for the parsing audit trail
    log_level: int = logging.INFO

    # When True the pipeline raises on any validation error instead of
    # returning partial results.
    strict_mode: bool = False
