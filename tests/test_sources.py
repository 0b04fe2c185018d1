"""
Tests for the source adapters (Seoul public toilets, Google Places) and the
shared BaseAPIClient, served from httpx.MockTransport.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from helpers import ORIGIN, north_of
from restroom_search.application.search.orchestrator import SourceAdapter
from restroom_search.infrastructure.sources import (
    BaseAPIClient,
    GooglePlacesClient,
    SeoulPublicToiletClient,
)
from restroom_search.shared.exceptions import (
    ConfigurationError,
    InvalidParameterError,
    NetworkError,
    RateLimitError,
    ServiceUnavailableError,
    UpstreamResponseError,
)


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _seoul_payload(rows, code="INFO-000", total=None):
    return {
        "SearchPublicToiletPOIService": {
            "list_total_count": len(rows) if total is None else total,
            "RESULT": {"CODE": code, "MESSAGE": "정상 처리되었습니다"},
            "row": rows,
        }
    }


def _row(poi_id, at):
    return {"POI_ID": poi_id, "FNAME": f"화장실 {poi_id}", "ANAME": "중구", "X_WGS84": at.longitude, "Y_WGS84": at.latitude}


# =============================================================================
# BaseAPIClient
# =============================================================================


class TestBaseAPIClient:
    async def test_returns_json(self):
        client = BaseAPIClient(
            base_url="https://api.test",
            client=_client(lambda request: httpx.Response(200, json={"ok": True})),
        )
        assert await client._make_request("/ping") == {"ok": True}

    async def test_invalid_json(self):
        client = BaseAPIClient(client=_client(lambda request: httpx.Response(200, text="<html>")))
        with pytest.raises(UpstreamResponseError):
            await client._make_request("https://api.test/ping")

    async def test_server_error(self):
        client = BaseAPIClient(client=_client(lambda request: httpx.Response(503)))
        with pytest.raises(ServiceUnavailableError):
            await client._make_request("https://api.test/ping")

    async def test_client_error_keeps_status(self):
        client = BaseAPIClient(client=_client(lambda request: httpx.Response(403)))
        with pytest.raises(UpstreamResponseError) as exc_info:
            await client._make_request("https://api.test/ping")
        assert exc_info.value.context.metadata["status"] == "403"

    async def test_rate_limit_retried_then_succeeds(self):
        responses = iter([httpx.Response(429, headers={"Retry-After": "0"}), httpx.Response(200, json=[1])])
        client = BaseAPIClient(client=_client(lambda request: next(responses)))
        assert await client._make_request("https://api.test/ping") == [1]

    async def test_rate_limit_exhausted(self):
        client = BaseAPIClient(client=_client(lambda request: httpx.Response(429, headers={"Retry-After": "0"})))
        with pytest.raises(RateLimitError):
            await client._make_request("https://api.test/ping")

    async def test_transport_error_becomes_network_error(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        client = BaseAPIClient(client=_client(handler))
        with patch("restroom_search.infrastructure.sources.base_client.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(NetworkError):
                await client._make_request("https://api.test/ping")
        assert len(calls) == BaseAPIClient._MAX_RETRIES + 1

    async def test_async_context_manager_closes(self):
        http = _client(lambda request: httpx.Response(200, json={}))
        async with BaseAPIClient(client=http):
            pass
        assert http.is_closed


# =============================================================================
# Seoul public toilets
# =============================================================================


class TestSeoulPublicToiletClient:
    def test_satisfies_adapter_protocol(self):
        assert isinstance(SeoulPublicToiletClient(api_key="k"), SourceAdapter)

    async def test_missing_key(self):
        client = SeoulPublicToiletClient(api_key="  ")
        assert not client.is_configured
        with pytest.raises(ConfigurationError):
            await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 500)

    async def test_keeps_rows_within_radius(self):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(
                200,
                json=_seoul_payload(
                    [
                        _row("near", north_of(ORIGIN, 200)),
                        _row("far", north_of(ORIGIN, 2000)),
                        {"POI_ID": "bad", "FNAME": "좌표 없음", "X_WGS84": None, "Y_WGS84": None},
                    ]
                ),
            )

        client = SeoulPublicToiletClient(api_key="secret", client=_client(handler))
        rows = await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 500)

        assert [r["POI_ID"] for r in rows] == ["near", "bad"]
        assert seen == ["/secret/json/SearchPublicToiletPOIService/1/1000/"]

    async def test_pages_until_total(self):
        pages = []

        def handler(request):
            start, end = request.url.path.strip("/").split("/")[-2:]
            pages.append((int(start), int(end)))
            return httpx.Response(200, json=_seoul_payload([_row(start, north_of(ORIGIN, 10))], total=3))

        client = SeoulPublicToiletClient(api_key="k", page_size=2, max_pages=5, min_interval=0, client=_client(handler))
        rows = await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 500)

        assert pages == [(1, 2), (3, 4)]
        assert len(rows) == 2

    async def test_default_scans_whole_registry(self):
        pages = []

        def handler(request):
            start, end = request.url.path.strip("/").split("/")[-2:]
            pages.append((int(start), int(end)))
            return httpx.Response(200, json=_seoul_payload([_row(start, north_of(ORIGIN, 10))], total=2500))

        client = SeoulPublicToiletClient(api_key="k", min_interval=0, client=_client(handler))
        rows = await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 500)

        assert pages == [(1, 1000), (1001, 2000), (2001, 3000)]
        assert [r["POI_ID"] for r in rows] == ["1", "1001", "2001"]

    async def test_max_pages_caps_scan(self):
        pages = []

        def handler(request):
            pages.append(request.url.path)
            return httpx.Response(200, json=_seoul_payload([_row("x", north_of(ORIGIN, 10))], total=4938))

        client = SeoulPublicToiletClient(api_key="k", max_pages=2, min_interval=0, client=_client(handler))
        await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 500)

        assert len(pages) == 2

    async def test_pages_are_rate_limited(self):
        payload = _seoul_payload([_row("x", north_of(ORIGIN, 10))], total=2500)
        client = SeoulPublicToiletClient(api_key="k", client=_client(lambda request: httpx.Response(200, json=payload)))

        sleep = AsyncMock()
        with patch("restroom_search.infrastructure.sources.base_client.asyncio.sleep", new=sleep):
            await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 500)

        assert sleep.await_count == 2
        assert all(0 < call.args[0] <= 0.1 for call in sleep.await_args_list)

    async def test_no_data_code_is_empty(self):
        payload = {"RESULT": {"CODE": "INFO-200", "MESSAGE": "해당하는 데이터가 없습니다."}}
        client = SeoulPublicToiletClient(api_key="k", client=_client(lambda request: httpx.Response(200, json=payload)))
        assert await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 500) == []

    @pytest.mark.parametrize("code", ["INFO-100", "ERROR-500", None])
    async def test_error_code_raises(self, code):
        payload = {"RESULT": {"CODE": code, "MESSAGE": "인증키가 유효하지 않습니다."}} if code else {}
        client = SeoulPublicToiletClient(api_key="k", client=_client(lambda request: httpx.Response(200, json=payload)))
        with pytest.raises(UpstreamResponseError):
            await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 500)

    async def test_row_not_a_list(self):
        payload = {"SearchPublicToiletPOIService": {"RESULT": {"CODE": "INFO-000"}, "row": "oops"}}
        client = SeoulPublicToiletClient(api_key="k", client=_client(lambda request: httpx.Response(200, json=payload)))
        with pytest.raises(UpstreamResponseError):
            await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 500)


# =============================================================================
# Google Places
# =============================================================================


def _place(name, at, place_id=None):
    return {
        "place_id": place_id or name,
        "name": name,
        "geometry": {"location": {"lat": at.latitude, "lng": at.longitude}},
        "vicinity": "Jung-gu",
    }


class TestGooglePlacesClient:
    def test_satisfies_adapter_protocol(self):
        assert isinstance(GooglePlacesClient(api_key="k"), SourceAdapter)

    async def test_missing_key(self):
        with pytest.raises(ConfigurationError):
            await GooglePlacesClient().search_near(ORIGIN.latitude, ORIGIN.longitude, 500, ["cafe"])

    async def test_rejects_public_category(self):
        client = GooglePlacesClient(api_key="k", client=_client(lambda request: httpx.Response(500)))
        with pytest.raises(InvalidParameterError):
            await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 500, ["public"])

    async def test_no_categories_makes_no_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        client = GooglePlacesClient(api_key="k", client=_client(handler))
        assert await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 500, []) == []

    async def test_brand_filter_and_category_tag(self):
        seen = []

        def handler(request):
            seen.append(dict(request.url.params))
            return httpx.Response(
                200,
                json={
                    "status": "OK",
                    "results": [
                        _place("Starbucks City Hall", north_of(ORIGIN, 90)),
                        _place("Random Coffee", north_of(ORIGIN, 120)),
                        _place("스타벅스 을지로점", north_of(ORIGIN, 300)),
                    ],
                },
            )

        client = GooglePlacesClient(api_key="key", client=_client(handler))
        places = await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 400, ["starbucks"])

        assert [p["name"] for p in places] == ["Starbucks City Hall", "스타벅스 을지로점"]
        assert all(p["category"] == "starbucks" for p in places)
        assert seen[0]["keyword"] == "Starbucks"
        assert seen[0]["radius"] == "400"
        assert seen[0]["language"] == "ko"
        assert seen[0]["location"] == f"{ORIGIN.latitude},{ORIGIN.longitude}"

    async def test_generic_category_keeps_everything(self):
        payload = {"status": "OK", "results": [_place("Random Coffee", north_of(ORIGIN, 50))]}
        client = GooglePlacesClient(api_key="k", client=_client(lambda request: httpx.Response(200, json=payload)))
        places = await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 400, ["cafe"])
        assert [p["category"] for p in places] == ["cafe"]

    async def test_radius_clamped(self):
        seen = []

        def handler(request):
            seen.append(request.url.params["radius"])
            return httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})

        client = GooglePlacesClient(api_key="k", client=_client(handler))
        assert await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 90_000, ["cafe"]) == []
        assert seen == ["50000"]

    async def test_over_query_limit(self):
        payload = {"status": "OVER_QUERY_LIMIT"}
        client = GooglePlacesClient(api_key="k", client=_client(lambda request: httpx.Response(200, json=payload)))
        with pytest.raises(RateLimitError):
            await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 400, ["cafe"])

    async def test_request_denied(self):
        payload = {"status": "REQUEST_DENIED", "error_message": "The provided API key is invalid."}
        client = GooglePlacesClient(api_key="k", client=_client(lambda request: httpx.Response(200, json=payload)))
        with pytest.raises(UpstreamResponseError, match="REQUEST_DENIED"):
            await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 400, ["cafe"])

    async def test_partial_category_failure_keeps_the_rest(self):
        def handler(request):
            if request.url.params["keyword"] == "EDIYA Coffee":
                return httpx.Response(200, json={"status": "INVALID_REQUEST"})
            return httpx.Response(200, json={"status": "OK", "results": [_place("Cafe Namu", north_of(ORIGIN, 40))]})

        client = GooglePlacesClient(api_key="k", client=_client(handler))
        places = await client.search_near(ORIGIN.latitude, ORIGIN.longitude, 400, ["ediya", "cafe"])

        assert [p["category"] for p in places] == ["cafe"]
