"""Environment configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from adreports.reportcenter.transport import BASE_URL


def _float_env(name: str, default: float) -> float:
    return float(os.environ.get(name, default))


def _list_env(name: str) -> list[str]:
    raw = os.environ.get(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(slots=True)
class ReportCenterSettings:
    app_key: str = ""
    user_key: str = ""
    base_url: str = BASE_URL
    poll_interval: float = 2.0
    max_wait: float = 60.0
    http_timeout: float = 30.0
    organization_ids: list[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "ReportCenterSettings":
        return cls(
            app_key=os.environ.get("SIMPLIFI_APP_KEY", ""),
            user_key=os.environ.get("SIMPLIFI_USER_KEY", ""),
            base_url=os.environ.get("REPORT_CENTER_BASE_URL", BASE_URL),
            poll_interval=_float_env("REPORT_CENTER_POLL_INTERVAL", 2.0),
            max_wait=_float_env("REPORT_CENTER_MAX_WAIT", 60.0),
            http_timeout=_float_env("REPORT_CENTER_HTTP_TIMEOUT", 30.0),
            organization_ids=_list_env("REPORT_CENTER_ORG_IDS"),
        )

    def require_credentials(self) -> None:
        if not self.app_key or not self.user_key:
            raise RuntimeError("SIMPLIFI_APP_KEY and SIMPLIFI_USER_KEY must be set")
