"""
Procurement dashboard API.

Serves parsed procurement sheet data and savings summaries as JSON for the
dashboard front end.
"""

from __future__ import annotations

import logging
import os
from io import BytesIO
from typing import Any, Dict

from flask import Flask, request, send_file

from procurement_mapper.config import PipelineConfig, SheetConfig, ValidationConfig
from procurement_mapper.excel_io import write_records
from procurement_mapper.pipeline import ProcurementSheetPipeline
from procurement_mapper.schema import EmptyInputError, PipelineOutput
from procurement_mapper.sheet_source import SheetFetchError
from web.savings_summary import SavingsSummary

# -------------------------------------------------------
# App Setup
# -------------------------------------------------------

app = Flask(__name__)

app.config["MAX_CONTENT_LENGTH"] = 16 * 1024 * 1024

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# -------------------------------------------------------
# Pipeline Setup
# -------------------------------------------------------

pipeline = ProcurementSheetPipeline(
    config=PipelineConfig(
        validation=ValidationConfig(
            required_fields=["manager", "member", "groupCategory"],
            error_on_duplicate=False,
        ),
        sheet=SheetConfig(
            sheet_id=os.environ.get("GOOGLE_SHEET_ID", ""),
            sheet_name=os.environ.get("SHEET_NAME", "Sheet1"),
            timeout=float(os.environ.get("SHEET_TIMEOUT", "15")),
        ),
        log_level=logging.WARNING,
    )
)

summary = SavingsSummary()

# -------------------------------------------------------
# Helpers
# -------------------------------------------------------


def build_response(output: PipelineOutput) -> Dict[str, Any]:
    """Shape a pipeline result for the dashboard."""
    return {
        "success": output.success,
        "records": [r.to_dict() for r in output.records],
        "summary": summary.summarize(output.records),
        "columns": output.column_map.to_dict() if output.column_map else {},
        "vendor_columns": list(output.vendor_columns),
        "suggestions": [s.to_dict() for s in output.suggestions],
        "warnings": list(output.validation_warnings),
        "errors": list(output.validation_errors),
    }


def error_response(message: str, status: int) -> tuple[Dict[str, Any], int]:
    return {"success": False, "error": message, "records": []}, status


def read_csv_body() -> str:
    """CSV text from a JSON ``{"csv": ...}`` body or a raw text body."""
    if request.is_json:
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise ValueError('JSON body must be an object with a "csv" string')
        text = payload.get("csv")
        if not isinstance(text, str):
            raise ValueError('JSON body must contain a "csv" string')
        return text
    return request.get_data(as_text=True)


# -------------------------------------------------------
# API
# -------------------------------------------------------


@app.route("/api/health", methods=["GET"])
def api_health():
    sheet = pipeline.config.sheet
    return {
        "status": "ok",
        "sheet_configured": bool(sheet.sheet_id),
        "sheet_name": sheet.sheet_name,
    }, 200


@app.route("/api/procurement", methods=["GET"])
def api_procurement():
    """Fetch the configured sheet tab (``?sheet=`` overrides) and parse it."""
    sheet_name = request.args.get("sheet") or None
    try:
        output = pipeline.fetch_sheet(sheet_name=sheet_name)
        return build_response(output), 200
    except EmptyInputError as e:
        return error_response(str(e), 422)
    except SheetFetchError as e:
        logger.warning("Sheet fetch failed: %s", e)
        return error_response(str(e), 502)
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception:
        logger.exception("API Error")
        return error_response("Internal error while parsing sheet", 500)


@app.route("/api/procurement/parse", methods=["POST"])
def api_parse():
    """Parse CSV text posted by the caller."""
    try:
        csv_text = read_csv_body()
    except ValueError as e:
        return error_response(str(e), 400)

    if not csv_text.strip():
        return error_response("Empty CSV body", 400)

    try:
        output = pipeline.parse_text(csv_text)
        return build_response(output), 200
    except EmptyInputError as e:
        return error_response(str(e), 422)
    except Exception:
        logger.exception("API Error")
        return error_response("Internal error while parsing CSV", 500)


@app.route("/api/procurement/export", methods=["GET"])
def api_export():
    """Fetch the sheet and return it as a normalised ``.xlsx`` download."""
    sheet_name = request.args.get("sheet") or None
    try:
        output = pipeline.fetch_sheet(sheet_name=sheet_name)
    except EmptyInputError as e:
        return error_response(str(e), 422)
    except SheetFetchError as e:
        logger.warning("Sheet fetch failed: %s", e)
        return error_response(str(e), 502)
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception:
        logger.exception("API Error")
        return error_response("Internal error while parsing sheet", 500)

    buffer = BytesIO()
    try:
        write_records(output.records, buffer)
    except Exception:
        logger.exception("Export Error")
        return error_response("Internal error while writing workbook", 500)
    buffer.seek(0)
    return send_file(
        buffer,
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name="procurement_data.xlsx",
    )


# -------------------------------------------------------
# Main
# -------------------------------------------------------

if __name__ == "__main__":
    port = int(os.environ.get("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=False)
