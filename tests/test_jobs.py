import pytest

from adreports.config import ReportCenterSettings
from adreports.jobs import warm
from adreports.reportcenter.cache import SqlModelCache
from adreports.reportcenter.models import ReportTemplate
from adreports.reportcenter.resolver import ReportModelResolver
from adreports.reportcenter.service import ReportCenterService
from adreports.utils import dates


@pytest.mark.asyncio
async def test_warm_report_models_resolves_every_template(fake_center, engine):
    fake = fake_center(existing=[ReportTemplate.DEVICE_BY_CAMPAIGN])
    service = ReportCenterService(fake, resolver=ReportModelResolver(fake, SqlModelCache(engine)))

    warmed = await warm.warm_report_models(service, [42, "43"])

    assert set(warmed) == {"42", "43"}
    assert warmed["42"]["device_breakdown"] == f"model-{int(ReportTemplate.DEVICE_BY_CAMPAIGN)}"
    assert len(warmed["43"]) == 7
    assert int(ReportTemplate.DEVICE_BY_CAMPAIGN) not in fake.created


@pytest.mark.asyncio
async def test_run_warm_without_orgs_is_noop(monkeypatch):
    monkeypatch.delenv("REPORT_CENTER_ORG_IDS", raising=False)
    monkeypatch.setattr(warm, "load_dotenv", lambda: None)
    assert await warm.run_warm() == {}


@pytest.mark.asyncio
async def test_run_warm_uses_settings(monkeypatch, fake_center):
    fake = fake_center()
    closed = []

    def fake_from_settings(settings, engine=None):
        assert settings.organization_ids == ["42", "43"]
        service = ReportCenterService(fake)

        async def close():
            closed.append(True)

        service.close = close
        return service

    monkeypatch.setenv("REPORT_CENTER_ORG_IDS", "42, 43,")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setattr(warm, "load_dotenv", lambda: None)
    monkeypatch.setattr(warm.ReportCenterService, "from_settings", staticmethod(fake_from_settings))

    warmed = await warm.run_warm()

    assert set(warmed) == {"42", "43"}
    assert closed == [True]


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("SIMPLIFI_APP_KEY", "app")
    monkeypatch.setenv("SIMPLIFI_USER_KEY", "user")
    monkeypatch.setenv("REPORT_CENTER_MAX_WAIT", "90")
    settings = ReportCenterSettings.from_env()
    assert settings.max_wait == 90.0
    assert settings.poll_interval == 2.0
    settings.require_credentials()


def test_missing_credentials():
    with pytest.raises(RuntimeError):
        ReportCenterSettings().require_credentials()


def test_report_date_range():
    assert dates.report_date_range("2024-05-01", "2024-05-31") == ("2024-05-01", "2024-05-31")
    with pytest.raises(ValueError):
        dates.report_date_range("2024-05-31", "2024-05-01")
    with pytest.raises(ValueError):
        dates.parse_iso_date("2024-02-30")
