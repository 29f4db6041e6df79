from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from excel_analytics_dashboard.core.api import XLSX_CONTENT_TYPE, RemoteClient
from excel_analytics_dashboard.core.errors import (
    AuthorizationError,
    StaleResponse,
    TransportError,
    ValidationError,
)
from excel_analytics_dashboard.core.generation import RequestGeneration
from excel_analytics_dashboard.core.history import HistoryCache
from excel_analytics_dashboard.core.io import dataset_from_upload_response, settings_to_form
from excel_analytics_dashboard.core.session import SessionContext, end_session
from excel_analytics_dashboard.core.state import ChartSettings, DashboardState, Dataset
from excel_analytics_dashboard.utils.log import log_event


@dataclass(frozen=True)
class SpreadsheetFile:
    filename: str
    content: bytes
    content_type: str = XLSX_CONTENT_TYPE


class UploadController:
    def __init__(
        self,
        state: DashboardState,
        session: SessionContext,
        client: RemoteClient,
        history: HistoryCache,
    ) -> None:
        self.state = state
        self.session = session
        self.client = client
        self.history = history
        self._generation = RequestGeneration()

    def submit(
        self,
        file: Optional[SpreadsheetFile],
        category_field: str = "",
        value_field: str = "",
        variant: str = "",
    ) -> Dataset:
        """Send a spreadsheet to the parser and install the returned rows.

        On success the axis selections are cleared, the variant goes back to
        the default and the history is refreshed. On failure nothing changes.
        """
        if file is None or not file.filename:
            raise ValidationError("Please select a file first.")

        form = settings_to_form(
            ChartSettings(category_field=category_field or "", value_field=value_field or "", variant=variant or "")
        )
        generation = self._generation.next()
        try:
            payload = self.client.upload(
                self.session,
                file.filename,
                file.content,
                form,
                content_type=file.content_type,
            )
            dataset = dataset_from_upload_response(payload)
        except AuthorizationError as exc:
            raise end_session(self.session, self.state, f"upload: {exc}") from exc
        except ValueError as exc:
            log_event("upload", f"{file.filename}: malformed parser response: {exc}")
            raise TransportError(f"Upload failed: {exc}") from exc
        except TransportError as exc:
            log_event("upload", f"{file.filename}: {exc}")
            raise

        if not self._generation.is_current(generation):
            log_event("upload", f"Discarded stale upload #{generation} ({file.filename})")
            raise StaleResponse(f"Upload of {file.filename} was superseded.")

        self.state.install_dataset(dataset)
        self.history.refresh()
        return dataset
