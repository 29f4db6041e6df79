"""Tests for image, document and table exports."""

from __future__ import annotations

import io
import os

import openpyxl
import pytest
from conftest import SALES_ROWS

from excel_analytics_dashboard import config
from excel_analytics_dashboard.core import export
from excel_analytics_dashboard.core.rendering import SurfaceContext, render
from excel_analytics_dashboard.core.state import ChartSettings, Dataset
from excel_analytics_dashboard.plotting.surface import build_surface


@pytest.fixture
def surface(sales_dataset: Dataset):
    artifact = render(sales_dataset, ChartSettings("region", "sales", "bar"), SurfaceContext(600.0, 400.0))
    return build_surface(artifact)


class TestImage:
    def test_png_bytes(self, surface) -> None:
        assert export.image_bytes(surface).startswith(b"\x89PNG")

    def test_written_to_fixed_filename(self, surface, tmp_path) -> None:
        path = export.export_image(surface, str(tmp_path))
        assert os.path.basename(path) == "excel-chart.png"
        assert os.path.getsize(path) > 0

    def test_no_surface_is_a_no_op(self, tmp_path) -> None:
        assert export.export_image(None, str(tmp_path)) is None
        assert list(tmp_path.iterdir()) == []


class TestDocument:
    def test_pdf_bytes(self, surface) -> None:
        blob = export.document_bytes(surface)
        assert blob.startswith(b"%PDF")

    def test_written_to_fixed_filename(self, surface, tmp_path) -> None:
        path = export.export_document(surface, str(tmp_path))
        assert os.path.basename(path) == config.DOCUMENT_FILENAME
        with open(path, "rb") as handle:
            assert handle.read(4) == b"%PDF"

    def test_no_surface_is_a_no_op(self, tmp_path) -> None:
        assert export.export_document(None, str(tmp_path)) is None


class TestTable:
    def test_sheet_named_data_with_row_order(self, sales_dataset: Dataset) -> None:
        book = openpyxl.load_workbook(io.BytesIO(export.table_bytes(sales_dataset)))
        assert book.sheetnames == ["Data"]
        rows = list(book["Data"].iter_rows(values_only=True))
        assert rows[0] == ("region", "sales")
        assert rows[1:] == [(r["region"], r["sales"]) for r in SALES_ROWS]

    def test_written_to_fixed_filename(self, sales_dataset: Dataset, tmp_path) -> None:
        path = export.export_table(sales_dataset, str(tmp_path))
        assert os.path.basename(path) == "excel-parsed-data.xlsx"

    def test_empty_dataset_is_a_no_op(self, tmp_path) -> None:
        assert export.table_bytes(Dataset()) is None
        assert export.export_table(Dataset(), str(tmp_path)) is None
        assert export.export_table(None, str(tmp_path)) is None
        assert list(tmp_path.iterdir()) == []

    def test_table_ignores_chart_settings(self, tmp_path) -> None:
        ds = Dataset.from_records([{"a": 1, "b": "x", "c": 2.5}])
        book = openpyxl.load_workbook(export.export_table(ds, str(tmp_path)))
        assert [cell.value for cell in book["Data"][1]] == ["a", "b", "c"]
