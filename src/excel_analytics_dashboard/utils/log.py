import os
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

LOG_PATH_ENV = "EXCEL_ANALYTICS_LOG"
DEFAULT_LOG_PATH = Path.home() / "ExcelAnalyticsDashboard_error.log"


def current_log_path() -> Path:
    """Log file in use: ``$EXCEL_ANALYTICS_LOG`` if set, else the home-directory default."""
    override = os.environ.get(LOG_PATH_ENV, "").strip()
    return Path(override).expanduser() if override else DEFAULT_LOG_PATH


def _safe_text(value: Any, max_len: int = 800) -> str:
    try:
        text = str(value)
    except Exception:
        text = repr(value)
    text = text.replace("\r", "\\r").replace("\n", "\\n")
    if len(text) > max_len:
        return text[: max_len - 3] + "..."
    return text


def log_event(context: str, message: str, log_path: Optional[Path] = None) -> None:
    """Append one line ``timestamp | context | message``.

    ``context`` names the pipeline stage (upload, history, remote, session).
    """
    try:
        with open(log_path or current_log_path(), "a", encoding="utf-8") as f:
            f.write(f"{datetime.now().isoformat()}  |  {context}  |  {_safe_text(message)}\n")
    except OSError:
        pass


def log_exception(context: str, log_path: Optional[Path] = None) -> None:
    """Append the traceback of the exception being handled."""
    try:
        with open(log_path or current_log_path(), "a", encoding="utf-8") as f:
            f.write("\n\n" + "=" * 80 + "\n")
            f.write(f"{datetime.now().isoformat()}  |  {context}\n")
            traceback.print_exc(file=f)
    except OSError:
        # a dashboard action must not fail because the log is unwritable
        pass
