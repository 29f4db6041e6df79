"""
Pytest configuration and shared fixtures for the dashboard tests.

This module contains:
- FakeStore: in-memory stand-in for the upload/history service, served
  through httpx.MockTransport so no sockets are opened
- Fixtures wiring the state, session, remote client and controllers
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from excel_analytics_dashboard.core.api import RemoteClient
from excel_analytics_dashboard.core.history import HistoryCache
from excel_analytics_dashboard.core.session import SessionContext
from excel_analytics_dashboard.core.state import DashboardState, Dataset
from excel_analytics_dashboard.core.upload import SpreadsheetFile, UploadController
from excel_analytics_dashboard.dashboard import Dashboard

VALID_TOKEN = "secret-token"
BASE_URL = "http://testserver"

SALES_ROWS = [
    {"region": "North", "sales": 120},
    {"region": "South", "sales": 95},
    {"region": "East", "sales": 143},
]


def history_json(entry_id: str, filename: str, rows: list[dict[str, Any]] | None = None, **extra: Any) -> dict:
    item: dict[str, Any] = {
        "_id": entry_id,
        "originalFilename": filename,
        "createdAt": "2024-05-01T10:00:00Z",
    }
    if rows is not None:
        item["parsedData"] = rows
    item.update(extra)
    return item


class FakeStore:
    """
    In-memory upload/history service.

    Responses are computed first and ``after_response`` hooks run before the
    response is returned, which lets a test start a newer request while an
    older one is still "in flight".
    """

    def __init__(self) -> None:
        self.history: list[dict[str, Any]] = []
        self.upload_queue: list[list[dict[str, Any]]] = []
        self.failures: dict[tuple[str, str], int] = {}
        self.requests: list[httpx.Request] = []
        self.after_response: Callable[[httpx.Request], None] | None = None
        self._counter = 0

    def fail(self, method: str, path_prefix: str, status: int) -> None:
        self.failures[(method, path_prefix)] = status

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._respond(request)
        hook = self.after_response
        if hook is not None:
            self.after_response = None
            hook(request)
        return response

    def _respond(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        for (method, prefix), status in self.failures.items():
            if request.method == method and path.startswith(prefix):
                return httpx.Response(status, json={"message": "failure"})

        if request.headers.get("Authorization") != f"Bearer {VALID_TOKEN}":
            return httpx.Response(401, json={"message": "unauthorized"})

        if request.method == "POST" and path == "/api/files/upload":
            rows = self.upload_queue.pop(0) if self.upload_queue else []
            match = re.search(rb'filename="([^"]*)"', request.content)
            filename = match.group(1).decode() if match else "upload.xlsx"
            self._counter += 1
            self.history.insert(0, history_json(f"id-{self._counter}", filename, rows, chartType="bar"))
            return httpx.Response(200, json={"data": rows})

        if request.method == "GET" and path == "/api/files/history":
            return httpx.Response(200, json=list(self.history))

        if request.method == "DELETE" and path.startswith("/api/files/history/"):
            entry_id = path.rsplit("/", 1)[-1]
            before = len(self.history)
            self.history = [h for h in self.history if h.get("_id") != entry_id]
            if len(self.history) == before:
                return httpx.Response(404, json={"message": "not found"})
            return httpx.Response(200, json={"message": "deleted"})

        return httpx.Response(404)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def client(store: FakeStore) -> RemoteClient:
    remote = RemoteClient(BASE_URL, transport=httpx.MockTransport(store.handler))
    yield remote
    remote.close()


@pytest.fixture
def session() -> SessionContext:
    return SessionContext(token=VALID_TOKEN)


@pytest.fixture
def state() -> DashboardState:
    return DashboardState()


@pytest.fixture
def history_cache(state: DashboardState, session: SessionContext, client: RemoteClient) -> HistoryCache:
    return HistoryCache(state, session, client)


@pytest.fixture
def upload_controller(
    state: DashboardState,
    session: SessionContext,
    client: RemoteClient,
    history_cache: HistoryCache,
) -> UploadController:
    return UploadController(state, session, client, history_cache)


@pytest.fixture
def dashboard(state: DashboardState, session: SessionContext, client: RemoteClient) -> Dashboard:
    return Dashboard(session=session, client=client, state=state)


@pytest.fixture
def sales_dataset() -> Dataset:
    return Dataset.from_records(SALES_ROWS)


@pytest.fixture
def spreadsheet() -> SpreadsheetFile:
    return SpreadsheetFile(filename="sales.xlsx", content=b"PK\x03\x04fake-xlsx")


@pytest.fixture(autouse=True)
def log_file(tmp_path_factory, monkeypatch):
    """Route diagnostics to a per-test file instead of the home directory."""
    path = tmp_path_factory.mktemp("logs") / "dashboard.log"
    monkeypatch.setenv("EXCEL_ANALYTICS_LOG", str(path))
    return path
