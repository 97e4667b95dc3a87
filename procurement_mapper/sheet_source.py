"""
Google Sheet source.

The dashboard reads a published Google Sheet through its gviz CSV export.
This module only builds that URL and downloads the text; parsing happens in
the pipeline.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

import requests

from procurement_mapper.logging_setup import get_logger

logger = get_logger("sheet_source")

EXPORT_URL_TEMPLATE = (
    "https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv&sheet={sheet}"
)

DEFAULT_TIMEOUT = 15.0


class SheetFetchError(RuntimeError):
    """Raised when the CSV export cannot be downloaded."""


def build_export_url(sheet_id: str, sheet_name: str) -> str:
    """Return the CSV export URL for one tab of a published sheet."""
    if not sheet_id:
        raise ValueError("sheet_id is required")
    return EXPORT_URL_TEMPLATE.format(sheet_id=sheet_id, sheet=quote(sheet_name, safe=""))


def fetch_csv(
    sheet_id: str,
    sheet_name: str,
    timeout: float = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> str:
    """Download one sheet tab as CSV text.

    Raises
    ------
    SheetFetchError
        On connection problems, timeouts, or a non-2xx response.
    """
    url = build_export_url(sheet_id, sheet_name)
    getter = session.get if session is not None else requests.get
    logger.info("Fetching sheet %r from %s", sheet_name, url)
    try:
        response = getter(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise SheetFetchError(f"Failed to fetch sheet {sheet_name!r}: {exc}") from exc

    response.encoding = response.encoding or "utf-8"
    text = response.text
    logger.info("Fetched %d characters from sheet %r", len(text), sheet_name)
    return text
