from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from excel_analytics_dashboard.core.errors import AuthorizationError, SessionExpired
from excel_analytics_dashboard.core.state import DashboardState
from excel_analytics_dashboard.utils.log import log_event

LOGIN_PATH = "/login"


@dataclass
class SessionContext:
    """Bearer token for the remote services plus the session-expired signal.

    Passed explicitly to every network-calling operation.
    """

    token: Optional[str] = None
    expired: bool = False

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and not self.expired

    def auth_headers(self) -> dict[str, str]:
        if not self.is_authenticated:
            raise AuthorizationError("No session token.")
        return {"Authorization": f"Bearer {self.token}"}

    def expire(self) -> None:
        self.token = None
        self.expired = True

    def logout(self) -> None:
        self.expire()

    def login(self, token: str) -> None:
        token = str(token or "").strip()
        if not token:
            raise AuthorizationError("Token cannot be blank.")
        self.token = token
        self.expired = False


def end_session(session: SessionContext, state: DashboardState, reason: str) -> SessionExpired:
    """Clear the token and every piece of in-memory dashboard state."""
    session.expire()
    state.clear()
    log_event("session", f"Session ended: {reason}")
    return SessionExpired(reason)
