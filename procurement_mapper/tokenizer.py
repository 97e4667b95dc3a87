"""
Row Tokenizer.

Turns the raw text of a spreadsheet CSV export into rows of string cells.

Google Sheets exports multi-line cells as quoted fields containing literal
newlines, so a logical row can span several physical lines.  The default
``QuoteBalancedTokenizer`` rebuilds logical rows by accumulating lines until
the number of ``"`` characters seen is even.  That heuristic matches the
legacy exports but desynchronises on a stray unbalanced quote; a stricter
``StrictCsvTokenizer`` is available behind the same interface.

Both tokenizers trim every cell and drop rows whose first cell is empty.
"""

from __future__ import annotations

import csv
from abc import ABC, abstractmethod
from io import StringIO
from typing import List, Optional

from procurement_mapper.config import TokenizerConfig
from procurement_mapper.logging_setup import get_logger
from procurement_mapper.schema import RawRow

logger = get_logger("tokenizer")


class RowTokenizer(ABC):
    """Interface shared by every CSV tokenizer."""

    @abstractmethod
    def tokenize(self, csv_text: str) -> List[RawRow]:
        """Split *csv_text* into rows of trimmed cells."""

    @staticmethod
    def _keep(row: RawRow) -> bool:
        return len(row) >= 1 and bool(row[0])


class QuoteBalancedTokenizer(RowTokenizer):
    """Legacy line-accumulating tokenizer.

    Parameters
    ----------
    secondary_delimiter:
        Optional extra cell separator (e.g. ``"\\t"``) honoured outside
        quotes in addition to the comma.
    """

    def __init__(self, secondary_delimiter: Optional[str] = None) -> None:
        self._secondary = secondary_delimiter

    def tokenize(self, csv_text: str) -> List[RawRow]:
        rows: List[RawRow] = []
        buffer = ""

        for line in csv_text.split("\n"):
            buffer += line
            if buffer.count('"') % 2 == 0 and buffer.strip():
                row = self.parse_row(buffer)
                if self._keep(row):
                    rows.append(row)
                else:
                    logger.debug("Dropping row with empty first cell: %r", buffer)
                buffer = ""
            else:
                # Still inside a quoted cell: the split consumed a real newline.
                buffer += "\n"

        if buffer.strip():
            logger.warning(
                "Unterminated quoted field at end of input; discarded %d characters",
                len(buffer),
            )

        logger.debug("Tokenized %d rows", len(rows))
        return rows

    def parse_row(self, row: str) -> RawRow:
        """Split one logical row into trimmed cells."""
        cells: RawRow = []
        current: List[str] = []
        in_quotes = False
        i = 0

        while i < len(row):
            char = row[i]
            if char == '"':
                if in_quotes and i + 1 < len(row) and row[i + 1] == '"':
                    current.append('"')
                    i += 1
                else:
                    in_quotes = not in_quotes
            elif not in_quotes and (char == "," or char == self._secondary):
                cells.append("".join(current).strip())
                current = []
            else:
                current.append(char)
            i += 1

        cells.append("".join(current).strip())
        return cells


class StrictCsvTokenizer(RowTokenizer):
    """RFC 4180 tokenizer built on the ``csv`` module.

    Quoted newlines are handled by the reader itself, so an odd quote only
    affects its own record.  Only the comma separates cells.
    """

    def tokenize(self, csv_text: str) -> List[RawRow]:
        rows: List[RawRow] = []
        reader = csv.reader(StringIO(csv_text, newline=""))
        try:
            for raw in reader:
                row = [cell.strip() for cell in raw]
                if self._keep(row):
                    rows.append(row)
        except csv.Error as exc:
            logger.warning("CSV reader stopped at line %d: %s", reader.line_num, exc)
        logger.debug("Tokenized %d rows (strict)", len(rows))
        return rows


def build_tokenizer(config: Optional[TokenizerConfig] = None) -> RowTokenizer:
    """Return the tokenizer selected by *config*."""
    config = config or TokenizerConfig()
    if config.strategy == "strict":
        return StrictCsvTokenizer()
    return QuoteBalancedTokenizer(config.secondary_delimiter)


def tokenize(csv_text: str, config: Optional[TokenizerConfig] = None) -> List[RawRow]:
    """Tokenize *csv_text* with the configured (default: legacy) tokenizer."""
    return build_tokenizer(config).tokenize(csv_text)
