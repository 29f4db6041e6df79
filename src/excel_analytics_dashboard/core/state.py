from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd

VARIANT_BAR = "bar"
VARIANT_LINE = "line"
VARIANT_PIE = "pie"
VARIANTS = (VARIANT_BAR, VARIANT_LINE, VARIANT_PIE)
DEFAULT_VARIANT = VARIANT_BAR

VARIANT_LABELS = {
    VARIANT_BAR: "Bar",
    VARIANT_LINE: "Line",
    VARIANT_PIE: "Pie",
}


@dataclass(frozen=True)
class Dataset:
    """Rows of the last upload or history load.

    The field set is taken from the first row. Datasets are replaced
    wholesale; callers never edit ``rows`` in place.
    """

    rows: tuple[dict[str, Any], ...] = ()

    @classmethod
    def from_records(cls, records: Any) -> "Dataset":
        if not isinstance(records, (list, tuple)):
            return cls()
        return cls(rows=tuple(dict(rec) for rec in records if isinstance(rec, dict)))

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def fields(self) -> list[str]:
        if not self.rows:
            return []
        return [str(k) for k in self.rows[0].keys()]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(list(self.rows))

    def to_records(self) -> list[dict[str, Any]]:
        return [dict(row) for row in self.rows]


@dataclass
class ChartSettings:
    category_field: str = ""
    value_field: str = ""
    variant: str = DEFAULT_VARIANT


@dataclass(frozen=True)
class HistoryEntry:
    entry_id: str
    original_filename: str = ""
    created_at: Optional[pd.Timestamp] = None
    dataset: Optional[Dataset] = None
    category_field: Optional[str] = None
    value_field: Optional[str] = None
    variant: Optional[str] = None

    def created_at_display(self) -> str:
        if self.created_at is None:
            return ""
        return self.created_at.strftime("%Y-%m-%d %H:%M:%S")


@dataclass
class DashboardState:
    """Shared, UI-agnostic state for one dashboard session."""

    dataset: Dataset = field(default_factory=Dataset)
    chart_settings: ChartSettings = field(default_factory=ChartSettings)
    history: list[HistoryEntry] = field(default_factory=list)

    def install_dataset(self, dataset: Dataset) -> None:
        self.dataset = dataset
        self.chart_settings = ChartSettings()

    def clear(self) -> None:
        self.dataset = Dataset()
        self.chart_settings = ChartSettings()
        self.history = []


def available_fields(dataset: Dataset) -> list[str]:
    return dataset.fields()


def set_category_field(state: DashboardState, category_field: Optional[str]) -> None:
    state.chart_settings.category_field = str(category_field or "")


def set_value_field(state: DashboardState, value_field: Optional[str]) -> None:
    state.chart_settings.value_field = str(value_field or "")


def set_variant(state: DashboardState, variant: Optional[str]) -> None:
    state.chart_settings.variant = str(variant or DEFAULT_VARIANT)


def chart_ready(state: DashboardState) -> bool:
    settings = state.chart_settings
    return bool(settings.category_field and settings.value_field and not state.dataset.is_empty)
