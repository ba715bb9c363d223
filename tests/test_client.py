"""Tests for the OpenWeatherMap client."""

import httpx
import pytest

from conftest import make_payload
from place_weather.weather.client import OpenWeatherClient
from place_weather.weather.errors import ConnectionFailure, HttpError, ProviderError, ProviderFault

BASE_URL = "https://api.test/data/3.0/onecall"


def make_client(handler):
    transport = httpx.MockTransport(handler)
    return OpenWeatherClient(
        api_key="test_key",
        base_url=BASE_URL,
        timeout=5,
        http_client=httpx.AsyncClient(transport=transport)
    )


class TestOpenWeatherClient:
    """Test suite for the provider client"""

    @pytest.mark.asyncio
    async def test_fetch_sends_one_call_parameters(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=make_payload())

        client = make_client(handler)
        data = await client.fetch_daily_forecast(32.65, -116.98)

        assert data["current"]["temp"] == 303.82
        assert len(seen) == 1
        params = seen[0].url.params
        assert seen[0].method == "GET"
        assert str(seen[0].url).startswith(BASE_URL)
        assert params["lat"] == "32.65"
        assert params["lon"] == "-116.98"
        assert params["appid"] == "test_key"
        assert params["exclude"] == "minutely,hourly,alerts"
        assert "units" not in params

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 404, 429, 500, 503])
    async def test_non_success_status_is_http_error(self, status):
        client = make_client(lambda request: httpx.Response(status, json={"cod": status, "message": "nope"}))

        with pytest.raises(HttpError) as exc_info:
            await client.fetch_daily_forecast(1.0, 2.0)

        assert exc_info.value.status_code == status
        assert exc_info.value.message == "nope"

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        client = make_client(lambda request: httpx.Response(502, text="<html>Bad gateway</html>"))

        with pytest.raises(HttpError) as exc_info:
            await client.fetch_daily_forecast(1.0, 2.0)

        assert exc_info.value.status_code == 502
        assert exc_info.value.message is None

    @pytest.mark.asyncio
    async def test_timeout_is_connection_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(handler)

        with pytest.raises(ConnectionFailure):
            await client.fetch_daily_forecast(1.0, 2.0)

    @pytest.mark.asyncio
    async def test_unreachable_is_connection_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(ConnectionFailure):
            await client.fetch_daily_forecast(1.0, 2.0)

    @pytest.mark.asyncio
    async def test_body_that_is_not_json_is_fault(self):
        client = make_client(lambda request: httpx.Response(200, text="not json"))

        with pytest.raises(ProviderFault):
            await client.fetch_daily_forecast(1.0, 2.0)

    @pytest.mark.asyncio
    async def test_body_that_is_not_an_object_is_fault(self):
        client = make_client(lambda request: httpx.Response(200, json=[1, 2, 3]))

        with pytest.raises(ProviderFault):
            await client.fetch_daily_forecast(1.0, 2.0)

    @pytest.mark.asyncio
    async def test_structured_error_body_is_fault(self):
        client = make_client(lambda request: httpx.Response(200, json={"cod": "400", "message": "wrong latitude"}))

        with pytest.raises(ProviderFault) as exc_info:
            await client.fetch_daily_forecast(1.0, 2.0)

        assert "wrong latitude" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_failures_share_a_base_class(self):
        client = make_client(lambda request: httpx.Response(500))

        with pytest.raises(ProviderError):
            await client.fetch_daily_forecast(1.0, 2.0)

    @pytest.mark.asyncio
    async def test_injected_http_client_is_left_open(self):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))

        async with OpenWeatherClient(api_key="k", http_client=http_client):
            pass

        assert not http_client.is_closed
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_owned_http_client_is_closed(self):
        client = OpenWeatherClient(api_key="k")

        async with client:
            pass

        assert client.client.is_closed
