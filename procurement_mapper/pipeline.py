"""
Pipeline Orchestrator.

The central entry point that wires together every layer:

    CSV text  →  Tokenizer  →  Column Resolver  →  Record Mapper
              →  Header Suggestions  →  Validator  →  Output

Usage
-----
>>> from procurement_mapper.pipeline import ProcurementSheetPipeline
>>> from procurement_mapper.config import PipelineConfig
>>>
>>> pipe = ProcurementSheetPipeline(PipelineConfig())
>>> result = pipe.parse_text(open("sheet.csv").read())
>>> print(result.to_dict())
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Union

from procurement_mapper import excel_io
from procurement_mapper.config import PipelineConfig
from procurement_mapper.fuzzy_matcher import FuzzyMatcher
from procurement_mapper.logging_setup import configure_logging, get_logger
from procurement_mapper.record_mapper import RecordMapper
from procurement_mapper.schema import PipelineOutput, RawRow
from procurement_mapper.sheet_source import fetch_csv
from procurement_mapper.tokenizer import build_tokenizer
from procurement_mapper.validator import Validator

logger = get_logger("pipeline")

TEXT_SUFFIXES = (".csv", ".txt")
WORKBOOK_SUFFIXES = (".xlsx", ".xlsm")


class ProcurementSheetPipeline:
    """Orchestrates the full sheet-parsing pipeline.

    Parameters
    ----------
    config:
        All tuneable knobs.  Defaults match the legacy dashboard.
    """

    def __init__(self, config: Optional[PipelineConfig] = None) -> None:
        self._config = config or PipelineConfig()

        # Bootstrap logging before anything else
        configure_logging(level=self._config.log_level)

        self._tokenizer = build_tokenizer(self._config.tokenizer)
        self._mapper = RecordMapper(config=self._config.matching)
        self._fuzzy = FuzzyMatcher(config=self._config.matching)
        self._validator = Validator(config=self._config.validation)

        logger.info(
            "Pipeline initialised — tokenizer=%s, secondary_delimiter=%r, strict=%s",
            self._config.tokenizer.strategy,
            self._config.tokenizer.secondary_delimiter,
            self._config.strict_mode,
        )

    @property
    def config(self) -> PipelineConfig:
        return self._config

    # ------------------------------------------------------------------ #
    # Convenience entry points (one per input format)
    # ------------------------------------------------------------------ #

    def parse_text(self, csv_text: str) -> PipelineOutput:
        """Parse the full text of a CSV export."""
        rows = self._tokenizer.tokenize(csv_text)
        logger.info("Tokenized %d rows (%d characters)", len(rows), len(csv_text))
        return self._run(rows)

    def parse_rows(self, rows: Sequence[RawRow]) -> PipelineOutput:
        """Parse rows that are already split into cells."""
        return self._run(rows)

    def parse_file(
        self,
        source: Union[str, Path],
        sheet_name: Optional[str] = None,
    ) -> PipelineOutput:
        """Parse a ``.csv`` / ``.txt`` export or an ``.xlsx`` workbook."""
        path = Path(source)
        suffix = path.suffix.lower()
        if suffix in TEXT_SUFFIXES:
            return self.parse_text(path.read_text(encoding="utf-8-sig"))
        if suffix in WORKBOOK_SUFFIXES:
            return self._run(excel_io.read_rows(path, sheet_name=sheet_name))
        raise ValueError(
            f"Unsupported file type: {suffix!r}. "
            f"Use {', '.join(TEXT_SUFFIXES + WORKBOOK_SUFFIXES)}"
        )

    def fetch_sheet(
        self,
        sheet_id: Optional[str] = None,
        sheet_name: Optional[str] = None,
    ) -> PipelineOutput:
        """Download a published Google Sheet tab and parse it.

        Falls back to ``config.sheet`` for anything not given.
        """
        sheet = self._config.sheet
        csv_text = fetch_csv(
            sheet_id or sheet.sheet_id,
            sheet_name or sheet.sheet_name,
            timeout=sheet.timeout,
        )
        return self.parse_text(csv_text)

    # ------------------------------------------------------------------ #
    # Core pipeline logic
    # ------------------------------------------------------------------ #

    def _run(self, rows: Sequence[RawRow]) -> PipelineOutput:
        """Map tokenized rows, then validate the result."""
        sheet = self._mapper.map_sheet(rows)
        column_map = sheet.column_map
        records = sheet.records

        suggestions = self._fuzzy.suggest_unresolved(column_map)

        report = self._validator.validate(
            column_map,
            sheet.vendor_columns,
            sheet.data_rows,
            records,
            coercion_warnings=sheet.coercion_warnings,
        )
        for s in suggestions:
            report.add_warning(
                f"'{s.field_key}' may be column {s.column} "
                f"'{s.header}' (similarity {s.score:.0f})"
            )

        output = PipelineOutput(
            records=records,
            column_map=column_map,
            vendor_columns=tuple(sheet.vendor_columns),
            suggestions=suggestions,
            validation_errors=report.errors,
            validation_warnings=report.warnings,
        )

        logger.info(
            "Pipeline complete — records=%d, skipped=%d, errors=%d, warnings=%d",
            len(records),
            len(sheet.data_rows) - len(records),
            len(report.errors),
            len(report.warnings),
        )

        if self._config.strict_mode and not output.success:
            raise RuntimeError(
                f"Strict mode: pipeline produced {len(report.errors)} "
                f"validation error(s):\n" + "\n".join(report.errors)
            )

        return output

    # ------------------------------------------------------------------ #
    # Utility
    # ------------------------------------------------------------------ #

    def tokenize(self, csv_text: str) -> List[RawRow]:
        """Expose the configured tokenizer (useful for diagnostics)."""
        return self._tokenizer.tokenize(csv_text)
