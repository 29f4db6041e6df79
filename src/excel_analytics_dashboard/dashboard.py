from __future__ import annotations

from typing import Optional

from matplotlib.figure import Figure

from excel_analytics_dashboard.core import export
from excel_analytics_dashboard.core.api import RemoteClient
from excel_analytics_dashboard.core.errors import SessionExpired
from excel_analytics_dashboard.core.history import ConfirmGate, HistoryCache
from excel_analytics_dashboard.core.rendering import ChartArtifact, render
from excel_analytics_dashboard.core.session import SessionContext
from excel_analytics_dashboard.core.state import (
    DashboardState,
    Dataset,
    HistoryEntry,
    chart_ready,
    set_category_field,
    set_value_field,
    set_variant,
)
from excel_analytics_dashboard.core.upload import SpreadsheetFile, UploadController
from excel_analytics_dashboard.plotting.surface import build_surface, surface_context


class Dashboard:
    """One user's dashboard: state, remote collaborators and the current chart.

    The chart is rebuilt after every dataset or settings change. The first
    build after the chart becomes visible has no surface to sample, so it is
    drawn flat and then redrawn with the gradient against the new surface.
    """

    def __init__(
        self,
        session: Optional[SessionContext] = None,
        client: Optional[RemoteClient] = None,
        state: Optional[DashboardState] = None,
    ) -> None:
        self.state = state or DashboardState()
        self.session = session or SessionContext()
        self.client = client or RemoteClient()
        self.history = HistoryCache(self.state, self.session, self.client)
        self.uploads = UploadController(self.state, self.session, self.client, self.history)
        self.artifact: Optional[ChartArtifact] = None
        self.surface: Optional[Figure] = None

    def _discard_chart(self) -> None:
        self.artifact = None
        self.surface = None

    def refresh_chart(self) -> Optional[ChartArtifact]:
        if not chart_ready(self.state):
            self._discard_chart()
            return None
        context = surface_context(self.surface) if self.surface is not None else None
        artifact = render(self.state.dataset, self.state.chart_settings, context)
        surface = build_surface(artifact)
        if context is None and not artifact.is_pie:
            artifact = render(self.state.dataset, self.state.chart_settings, surface_context(surface))
            surface = build_surface(artifact)
        self.artifact = artifact
        self.surface = surface
        return artifact

    # -- remote operations -------------------------------------------------

    def open(self) -> list[HistoryEntry]:
        """Initial history fetch when the dashboard is shown."""
        try:
            return self.history.refresh()
        except SessionExpired:
            self._discard_chart()
            raise

    def refresh_history(self) -> list[HistoryEntry]:
        return self.open()

    def upload(
        self,
        file: Optional[SpreadsheetFile],
        category_field: str = "",
        value_field: str = "",
        variant: str = "",
    ) -> Dataset:
        # submit may replace the dataset and then fail on the history refresh
        try:
            return self.uploads.submit(file, category_field, value_field, variant)
        finally:
            self.refresh_chart()

    def load(self, entry_id: str) -> bool:
        entry = self.history.find(entry_id)
        if entry is None:
            return False
        self.history.load(entry)
        self.refresh_chart()
        return True

    def delete(self, entry_id: str, confirm: ConfirmGate) -> bool:
        try:
            return self.history.delete(entry_id, confirm)
        except SessionExpired:
            self._discard_chart()
            raise

    def logout(self) -> None:
        self.session.logout()
        self.state.clear()
        self._discard_chart()

    # -- configuration -----------------------------------------------------

    def set_category_field(self, category_field: Optional[str]) -> Optional[ChartArtifact]:
        set_category_field(self.state, category_field)
        return self.refresh_chart()

    def set_value_field(self, value_field: Optional[str]) -> Optional[ChartArtifact]:
        set_value_field(self.state, value_field)
        return self.refresh_chart()

    def set_variant(self, variant: Optional[str]) -> Optional[ChartArtifact]:
        set_variant(self.state, variant)
        return self.refresh_chart()

    # -- exports -------------------------------------------------------------

    def export_image(self, directory: Optional[str] = None) -> Optional[str]:
        return export.export_image(self.surface, directory)

    def export_document(self, directory: Optional[str] = None) -> Optional[str]:
        return export.export_document(self.surface, directory)

    def export_table(self, directory: Optional[str] = None) -> Optional[str]:
        return export.export_table(self.state.dataset, directory)
