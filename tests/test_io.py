"""Tests for wire-format conversion of upload and history payloads."""

from __future__ import annotations

import json

import pytest
from conftest import SALES_ROWS, history_json

from excel_analytics_dashboard.core.io import (
    dataset_from_upload_response,
    dataset_preview_json,
    history_entry_from_json,
    history_from_json,
    parse_timestamp,
    settings_to_form,
)
from excel_analytics_dashboard.core.state import ChartSettings, Dataset


class TestUploadResponse:
    def test_data_key_becomes_dataset(self) -> None:
        ds = dataset_from_upload_response({"data": SALES_ROWS})
        assert ds.rows == tuple(SALES_ROWS)

    def test_missing_data_gives_empty_dataset(self) -> None:
        assert dataset_from_upload_response({}).is_empty

    def test_non_object_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            dataset_from_upload_response([1, 2, 3])


class TestHistoryEntry:
    def test_full_entry(self) -> None:
        entry = history_entry_from_json(
            history_json("abc", "q1.xlsx", SALES_ROWS, xAxis="region", yAxis="sales", chartType="line")
        )
        assert entry.entry_id == "abc"
        assert entry.original_filename == "q1.xlsx"
        assert entry.created_at is not None
        assert entry.created_at.year == 2024
        assert entry.dataset == Dataset.from_records(SALES_ROWS)
        assert (entry.category_field, entry.value_field, entry.variant) == ("region", "sales", "line")

    def test_absent_snapshot_fields_stay_none(self) -> None:
        entry = history_entry_from_json({"_id": "x"})
        assert entry.dataset is None
        assert entry.category_field is None
        assert entry.value_field is None
        assert entry.variant is None
        assert entry.created_at is None
        assert entry.created_at_display() == ""

    def test_missing_id_falls_back_to_position(self) -> None:
        assert history_entry_from_json({"originalFilename": "a.xlsx"}, index=4).entry_id == "4"

    def test_listing_preserves_order(self) -> None:
        entries = history_from_json([history_json("2", "b.xlsx"), history_json("1", "a.xlsx")])
        assert [e.entry_id for e in entries] == ["2", "1"]

    def test_listing_must_be_a_list(self) -> None:
        with pytest.raises(ValueError):
            history_from_json({"items": []})

    def test_listing_items_must_be_objects(self) -> None:
        with pytest.raises(ValueError):
            history_from_json(["not-an-object"])

    def test_unparseable_timestamp(self) -> None:
        assert parse_timestamp("not a date") is None
        assert parse_timestamp("") is None


class TestFormAndPreview:
    def test_settings_to_form_uses_wire_names(self) -> None:
        assert settings_to_form(ChartSettings("region", "sales", "pie")) == {
            "xAxis": "region",
            "yAxis": "sales",
            "chartType": "pie",
        }

    def test_preview_is_indented_json(self) -> None:
        text = dataset_preview_json(Dataset.from_records(SALES_ROWS))
        assert json.loads(text) == SALES_ROWS
        assert "\n  " in text
