from __future__ import annotations

import json
from typing import Any, Optional

import numpy as np
import pandas as pd

from excel_analytics_dashboard.core.state import ChartSettings, Dataset, HistoryEntry

ENTRY_ID_KEY = "_id"


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def parse_timestamp(value: Any) -> Optional[pd.Timestamp]:
    if value in (None, ""):
        return None
    ts = pd.to_datetime(value, errors="coerce", utc=True)
    if pd.isna(ts):
        return None
    return ts


def dataset_from_upload_response(payload: Any) -> Dataset:
    """Accepts ``{"data": [row, ...]}`` as returned by the parser service."""
    if isinstance(payload, dict):
        return Dataset.from_records(payload.get("data"))
    raise ValueError("Unrecognized upload response.")


def history_entry_from_json(obj: Any, index: int = 0) -> HistoryEntry:
    """Build a HistoryEntry from one element of the history listing.

    Snapshot fields the store omitted stay None so that ``load`` can apply
    its own fallbacks.
    """
    if not isinstance(obj, dict):
        raise ValueError(f"History item {index} is not an object.")
    entry_id = obj.get(ENTRY_ID_KEY, obj.get("id"))
    parsed = obj.get("parsedData")
    return HistoryEntry(
        entry_id=str(entry_id) if entry_id is not None else str(index),
        original_filename=str(obj.get("originalFilename") or ""),
        created_at=parse_timestamp(obj.get("createdAt")),
        dataset=Dataset.from_records(parsed) if isinstance(parsed, list) else None,
        category_field=_optional_str(obj.get("xAxis")),
        value_field=_optional_str(obj.get("yAxis")),
        variant=_optional_str(obj.get("chartType")),
    )


def history_from_json(payload: Any) -> list[HistoryEntry]:
    if not isinstance(payload, list):
        raise ValueError("History response must be a list.")
    return [history_entry_from_json(obj, idx) for idx, obj in enumerate(payload)]


def settings_to_form(settings: ChartSettings) -> dict[str, str]:
    return {
        "xAxis": settings.category_field,
        "yAxis": settings.value_field,
        "chartType": settings.variant,
    }


def _jsonable(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    return value


def dataset_preview_json(dataset: Dataset) -> str:
    """Pretty-printed rows for the parsed-data panel."""
    records = [{k: _jsonable(v) for k, v in row.items()} for row in dataset.rows]
    return json.dumps(records, indent=2, default=str)
