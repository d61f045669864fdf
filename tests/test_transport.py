import httpx
import pytest
import respx

from adreports.reportcenter.errors import (
    AuthenticationError,
    ConnectivityError,
    NotFoundError,
    RateLimitedError,
    RemoteApiError,
)
from adreports.reportcenter.transport import BASE_URL, ReportCenterTransport

REPORTS_URL = f"{BASE_URL}/organizations/42/report_center/reports"


@pytest.mark.asyncio
async def test_request_sends_credentials_and_decodes_json():
    async with respx.mock(assert_all_called=True) as router:
        route = router.get(REPORTS_URL).mock(return_value=httpx.Response(200, json={"reports": [{"id": 7}]}))
        async with ReportCenterTransport("app-key", "user-key") as transport:
            data = await transport.get("/organizations/42/report_center/reports")
    assert data == {"reports": [{"id": 7}]}
    request = route.calls.last.request
    assert request.headers["X-App-Key"] == "app-key"
    assert request.headers["X-User-Key"] == "user-key"


@pytest.mark.asyncio
async def test_absolute_download_link_is_reduced_to_api_path():
    async with respx.mock(assert_all_called=True) as router:
        router.get(f"{BASE_URL}/downloads/abc.json").mock(return_value=httpx.Response(200, json=[{"a": 1}]))
        async with ReportCenterTransport("k", "u") as transport:
            assert transport.url_for(f"{BASE_URL}/downloads/abc.json") == f"{BASE_URL}/downloads/abc.json"
            assert transport.url_for("downloads/abc.json") == f"{BASE_URL}/downloads/abc.json"
            rows = await transport.get(f"{BASE_URL}/downloads/abc.json")
    assert rows == [{"a": 1}]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, error",
    [(401, AuthenticationError), (404, NotFoundError), (429, RateLimitedError), (500, RemoteApiError)],
)
async def test_status_codes_map_to_errors(status, error):
    async with respx.mock() as router:
        router.get(REPORTS_URL).mock(return_value=httpx.Response(status, json={"error": "nope"}))
        async with ReportCenterTransport("k", "u") as transport:
            with pytest.raises(error):
                await transport.get("/organizations/42/report_center/reports")


@pytest.mark.asyncio
async def test_remote_error_carries_status_and_message():
    async with respx.mock() as router:
        router.post(REPORTS_URL).mock(return_value=httpx.Response(422, json={"errors": "template_id is invalid"}))
        async with ReportCenterTransport("k", "u") as transport:
            with pytest.raises(RemoteApiError) as excinfo:
                await transport.post("/organizations/42/report_center/reports", {"template_id": 1})
    assert excinfo.value.status_code == 422
    assert excinfo.value.message == "template_id is invalid"


@pytest.mark.asyncio
async def test_rate_limit_reads_retry_after():
    async with respx.mock() as router:
        router.get(REPORTS_URL).mock(return_value=httpx.Response(429, headers={"Retry-After": "3"}, text="slow down"))
        async with ReportCenterTransport("k", "u") as transport:
            with pytest.raises(RateLimitedError) as excinfo:
                await transport.get("/organizations/42/report_center/reports")
    assert excinfo.value.retry_after == 3.0


@pytest.mark.asyncio
async def test_connection_failure_is_connectivity_error():
    async with respx.mock() as router:
        router.get(REPORTS_URL).mock(side_effect=httpx.ConnectError("connection refused"))
        async with ReportCenterTransport("k", "u") as transport:
            with pytest.raises(ConnectivityError):
                await transport.get("/organizations/42/report_center/reports")
