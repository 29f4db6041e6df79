from __future__ import annotations

import os
from typing import Optional

API_BASE_URL = os.environ.get("EXCEL_ANALYTICS_API_URL", "http://localhost:5000").rstrip("/")

UPLOAD_PATH = "/api/files/upload"
HISTORY_PATH = "/api/files/history"

UPLOAD_ACCEPT = ".xlsx,.xls"

IMAGE_FILENAME = "excel-chart.png"
DOCUMENT_FILENAME = "excel-chart.pdf"
TABLE_FILENAME = "excel-parsed-data.xlsx"
TABLE_SHEET_NAME = "Data"

EXPORT_DIR = os.environ.get("EXCEL_ANALYTICS_EXPORT_DIR", "")


def parse_timeout(text: Optional[str]) -> Optional[float]:
    """Return a request timeout in seconds, or None for no timeout."""
    text = str(text or "").strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if value > 0 else None


REQUEST_TIMEOUT = parse_timeout(os.environ.get("EXCEL_ANALYTICS_TIMEOUT"))
