from __future__ import annotations

from typing import Optional


class DashboardError(Exception):
    """Base class for failures surfaced by the dashboard pipeline."""


class ValidationError(DashboardError):
    """The operation was blocked before any state change or request."""


class AuthorizationError(DashboardError):
    """The remote service rejected the session token (401/403) or none was set."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(DashboardError):
    """Any other network or HTTP failure."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionExpired(DashboardError):
    """The session was terminated; the caller must return to the login entry point."""


class StaleResponse(DashboardError):
    """A response arrived after a newer request of the same kind was started."""
