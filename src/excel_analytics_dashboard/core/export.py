from __future__ import annotations

import io
import os
from typing import Optional

import pandas as pd
from matplotlib.figure import Figure

from excel_analytics_dashboard import config
from excel_analytics_dashboard.core.state import Dataset
from excel_analytics_dashboard.plotting.surface import surface_png_bytes
from excel_analytics_dashboard.version import APP_TITLE

DOCUMENT_MARGIN_MM = 10.0
RASTER_DPI = 200


def _export_path(directory: Optional[str], filename: str) -> str:
    base = directory or config.EXPORT_DIR or os.getcwd()
    os.makedirs(base, exist_ok=True)
    return os.path.join(base, filename)


def _write(path: str, blob: bytes) -> str:
    with open(path, "wb") as handle:
        handle.write(blob)
    return path


def image_bytes(surface: Optional[Figure]) -> Optional[bytes]:
    if surface is None:
        return None
    return surface_png_bytes(surface)


def document_bytes(surface: Optional[Figure]) -> Optional[bytes]:
    """Rasterize ``surface`` onto one A4 page.

    The image spans the page width minus the margins; its height follows
    the surface aspect ratio.
    """
    if surface is None:
        return None

    from reportlab.lib.pagesizes import A4
    from reportlab.lib.units import mm
    from reportlab.lib.utils import ImageReader
    from reportlab.pdfgen import canvas

    raster = ImageReader(io.BytesIO(surface_png_bytes(surface, dpi=RASTER_DPI)))
    px_w, px_h = raster.getSize()

    page_w, page_h = A4
    margin = DOCUMENT_MARGIN_MM * mm
    img_w = page_w - 2 * margin
    img_h = (float(px_h) / float(px_w)) * img_w

    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=A4)
    pdf.setTitle(APP_TITLE)
    pdf.drawImage(raster, margin, page_h - margin - img_h, width=img_w, height=img_h, mask="auto")
    pdf.showPage()
    pdf.save()
    return buf.getvalue()


def table_bytes(dataset: Optional[Dataset]) -> Optional[bytes]:
    if dataset is None or dataset.is_empty:
        return None
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        dataset.to_frame().to_excel(writer, index=False, sheet_name=config.TABLE_SHEET_NAME)
    return buf.getvalue()


def export_image(surface: Optional[Figure], directory: Optional[str] = None) -> Optional[str]:
    blob = image_bytes(surface)
    if blob is None:
        return None
    return _write(_export_path(directory, config.IMAGE_FILENAME), blob)


def export_document(surface: Optional[Figure], directory: Optional[str] = None) -> Optional[str]:
    blob = document_bytes(surface)
    if blob is None:
        return None
    return _write(_export_path(directory, config.DOCUMENT_FILENAME), blob)


def export_table(dataset: Optional[Dataset], directory: Optional[str] = None) -> Optional[str]:
    blob = table_bytes(dataset)
    if blob is None:
        return None
    return _write(_export_path(directory, config.TABLE_FILENAME), blob)
