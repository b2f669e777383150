"""Error taxonomy shared by the store, the web layer and the clients."""

from __future__ import annotations


class PlannerError(Exception):
    """Base class for every error Planbook reports to a user."""


class ValidationError(PlannerError, ValueError):
    """Input rejected before anything was changed (blank text, bad date, bad cell)."""


class NotFoundError(PlannerError, LookupError):
    """A history snapshot, session or planner id that does not exist."""


class NetworkError(PlannerError):
    """The server could not be reached or the transport failed."""


class ServerError(PlannerError):
    """The server answered, but not with a success response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SaveInProgressError(PlannerError):
    """A save was requested while another save is still in flight."""
