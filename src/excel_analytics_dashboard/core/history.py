from __future__ import annotations

from typing import Callable

from excel_analytics_dashboard.core.api import RemoteClient
from excel_analytics_dashboard.core.errors import AuthorizationError, TransportError
from excel_analytics_dashboard.core.generation import RequestGeneration
from excel_analytics_dashboard.core.io import history_from_json
from excel_analytics_dashboard.core.session import SessionContext, end_session
from excel_analytics_dashboard.core.state import (
    DEFAULT_VARIANT,
    ChartSettings,
    DashboardState,
    Dataset,
    HistoryEntry,
)
from excel_analytics_dashboard.utils.log import log_event

ConfirmGate = Callable[[str], bool]


class HistoryCache:
    """Client-side mirror of the upload records held by the remote store.

    The cache is authoritative only right after ``refresh``. Entries are
    never edited in place: they are dropped on a confirmed delete or cloned
    into the live dataset/settings on ``load``.
    """

    def __init__(self, state: DashboardState, session: SessionContext, client: RemoteClient) -> None:
        self.state = state
        self.session = session
        self.client = client
        self._refresh_generation = RequestGeneration()

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self.state.history)

    def find(self, entry_id: str) -> HistoryEntry | None:
        for entry in self.state.history:
            if entry.entry_id == entry_id:
                return entry
        return None

    def refresh(self) -> list[HistoryEntry]:
        """Replace the cache with the store's listing, in the store's order.

        A response overtaken by a newer refresh is discarded and the
        current cache is returned unchanged.
        """
        generation = self._refresh_generation.next()
        try:
            payload = self.client.fetch_history(self.session)
        except AuthorizationError as exc:
            raise end_session(self.session, self.state, f"history refresh: {exc}") from exc
        try:
            entries = history_from_json(payload)
        except ValueError as exc:
            log_event("history", f"Malformed history response: {exc}")
            raise TransportError(f"Malformed history response: {exc}") from exc

        if not self._refresh_generation.is_current(generation):
            log_event("history", f"Discarded stale refresh #{generation}")
            return self.entries
        self.state.history = entries
        return self.entries

    def load(self, entry: HistoryEntry) -> None:
        self.state.dataset = entry.dataset if entry.dataset is not None else Dataset()
        self.state.chart_settings = ChartSettings(
            category_field=entry.category_field or "",
            value_field=entry.value_field or "",
            variant=entry.variant or DEFAULT_VARIANT,
        )

    def delete(self, entry_id: str, confirm: ConfirmGate) -> bool:
        """Delete one record after ``confirm`` agrees.

        The local entry is dropped only once the store acknowledges the
        delete. A failed request leaves the cache as it was and re-raises.
        """
        if not confirm(entry_id):
            return False
        try:
            self.client.delete_history(self.session, entry_id)
        except AuthorizationError as exc:
            raise end_session(self.session, self.state, f"history delete: {exc}") from exc
        except TransportError as exc:
            log_event("history", f"Delete of {entry_id} failed: {exc}")
            raise
        self.state.history = [h for h in self.state.history if h.entry_id != entry_id]
        return True
