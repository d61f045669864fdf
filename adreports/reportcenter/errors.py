"""Report Center error taxonomy."""

from __future__ import annotations


class ReportCenterError(Exception):
    """Base class for failures talking to the Report Center."""


class AuthenticationError(ReportCenterError):
    """Credentials were rejected; no report can succeed."""


class RateLimitedError(ReportCenterError):
    def __init__(self, message: str = "Rate limited", *, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class NotFoundError(ReportCenterError):
    pass


class ConnectivityError(ReportCenterError):
    pass


class RemoteApiError(ReportCenterError):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class SnapshotFailedError(ReportCenterError):
    pass


class SnapshotTimeoutError(ReportCenterError):
    pass


class ReportModelUnavailable(ReportCenterError):
    pass
