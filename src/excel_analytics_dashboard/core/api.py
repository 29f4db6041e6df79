from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

import httpx

from excel_analytics_dashboard import config
from excel_analytics_dashboard.core.errors import AuthorizationError, TransportError
from excel_analytics_dashboard.core.session import SessionContext
from excel_analytics_dashboard.utils.log import log_event

AUTH_FAILURE_STATUSES = (401, 403)
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class RemoteClient:
    """httpx wrapper for the parser/history endpoints.

    401/403 become AuthorizationError; every other failure becomes
    TransportError. Nothing is retried.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = config.REQUEST_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def _request(self, session: SessionContext, method: str, path: str, **kwargs: Any) -> httpx.Response:
        headers = session.auth_headers()
        try:
            response = self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            log_event("remote", f"{method} {path} failed: {type(exc).__name__}: {exc}")
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        if response.status_code in AUTH_FAILURE_STATUSES:
            log_event("remote", f"{method} {path} rejected with {response.status_code}")
            raise AuthorizationError(
                f"{method} {path} rejected the session token.",
                status_code=response.status_code,
            )
        if response.is_error:
            log_event("remote", f"{method} {path} returned {response.status_code}")
            raise TransportError(
                f"{method} {path} returned HTTP {response.status_code}.",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"Invalid JSON from {response.request.url}: {exc}") from exc

    def upload(
        self,
        session: SessionContext,
        filename: str,
        content: bytes,
        form: dict[str, str],
        content_type: str = XLSX_CONTENT_TYPE,
    ) -> Any:
        files = {"file": (filename, content, content_type)}
        response = self._request(session, "POST", config.UPLOAD_PATH, data=form, files=files)
        return self._json(response)

    def fetch_history(self, session: SessionContext) -> Any:
        response = self._request(session, "GET", config.HISTORY_PATH)
        return self._json(response)

    def delete_history(self, session: SessionContext, entry_id: str) -> None:
        path = f"{config.HISTORY_PATH}/{quote(str(entry_id), safe='')}"
        self._request(session, "DELETE", path)
