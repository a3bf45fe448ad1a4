"""
Test PhotoResolver and GeocodeResolver

Both resolvers talk to Google over httpx; here the transport is mocked.
Neither may ever raise to its caller.
"""
import httpx
import pytest

from app.models.gems import GeocodeResult
from app.models.lookup import Found, NotFound
from app.services.geocode_resolver import GeocodeResolver
from app.services.photo_resolver import PhotoResolver


def client_for(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def photo_resolver(handler, api_key="test-key"):
    resolver = PhotoResolver(api_key=api_key, http_client=client_for(handler), max_concurrency=2)
    resolver.proxy_url = None
    return resolver


class TestPhotoResolver:
    @pytest.mark.asyncio
    async def test_found_with_location_bias(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json={
                "status": "OK",
                "candidates": [{"photos": [{"photo_reference": "ref-123"}]}],
            })

        result = await photo_resolver(handler).resolve("Sunder Nursery", 28.59, 77.24)

        assert isinstance(result, Found)
        assert "photoreference=ref-123" in result.value
        assert seen["input"] == "Sunder Nursery"
        assert seen["fields"] == "photos"
        assert seen["locationbias"] == "point:28.59,77.24"

    @pytest.mark.asyncio
    async def test_no_bias_without_both_coordinates(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json={"status": "ZERO_RESULTS", "candidates": []})

        result = await photo_resolver(handler).resolve("Hauz Khas", 28.55, None)

        assert isinstance(result, NotFound)
        assert "locationbias" not in seen

    @pytest.mark.asyncio
    async def test_candidate_without_photos(self):
        def handler(request):
            return httpx.Response(200, json={"status": "OK", "candidates": [{"name": "x"}]})

        result = await photo_resolver(handler).resolve("Agrasen ki Baoli")
        assert result == NotFound(reason="no photo")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(500, text="boom"),
        httpx.Response(200, json={"status": "OVER_QUERY_LIMIT"}),
        httpx.Response(200, text="not json"),
    ])
    async def test_failures_collapse_to_not_found(self, response):
        result = await photo_resolver(lambda request: response).resolve("Sunder Nursery")
        assert isinstance(result, NotFound)

    @pytest.mark.asyncio
    async def test_network_error_collapses_to_not_found(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        result = await photo_resolver(handler).resolve("Sunder Nursery")
        assert isinstance(result, NotFound)
        assert result.reason == "ConnectError"

    @pytest.mark.asyncio
    async def test_http_error_does_not_leak_api_key(self, caplog):
        """The request URL carries the key; neither the reason nor the log may."""
        handler = lambda request: httpx.Response(403, text="denied")

        with caplog.at_level("WARNING"):
            result = await photo_resolver(handler, api_key="secret-key").resolve("Sunder Nursery")

        assert result == NotFound(reason="HTTP 403")
        assert "Photo lookup failed" in caplog.text
        assert "secret-key" not in caplog.text

    @pytest.mark.asyncio
    async def test_unconfigured_makes_no_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={})

        result = await photo_resolver(handler, api_key="").resolve("Sunder Nursery")
        assert result == NotFound(reason="not configured")
        assert calls == []

    def test_proxy_url_hides_key(self):
        resolver = photo_resolver(lambda request: httpx.Response(200), api_key="secret")
        resolver.proxy_url = "http://localhost:8000/api/v1/lookup/photo-proxy"
        url = resolver.photo_url("ref-1")
        assert url.startswith("http://localhost:8000/api/v1/lookup/photo-proxy?")
        assert "photo_reference=ref-1" in url
        assert "secret" not in url


class TestGeocodeResolver:
    @pytest.mark.asyncio
    async def test_found(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json={
                "status": "OK",
                "results": [{
                    "formatted_address": "Lodi Road, New Delhi",
                    "geometry": {"location": {"lat": 28.59, "lng": 77.22}},
                }],
            })

        resolver = GeocodeResolver(api_key="k", http_client=client_for(handler), region="in")
        result = await resolver.resolve("Lodi Rd, Delhi")

        assert result == Found(value=GeocodeResult(
            lat=28.59, lng=77.22, formatted_address="Lodi Road, New Delhi"
        ))
        assert seen["address"] == "Lodi Rd, Delhi"
        assert seen["region"] == "in"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []}),
        httpx.Response(200, json={"status": "OK", "results": [{"geometry": {}}]}),
        httpx.Response(403, json={"error_message": "denied"}),
    ])
    async def test_unresolved(self, response):
        resolver = GeocodeResolver(api_key="k", http_client=client_for(lambda request: response))
        assert isinstance(await resolver.resolve("Nowhere"), NotFound)

    @pytest.mark.asyncio
    async def test_blank_address(self):
        resolver = GeocodeResolver(api_key="k", http_client=client_for(lambda request: httpx.Response(200)))
        assert await resolver.resolve("   ") == NotFound(reason="empty address")

    @pytest.mark.asyncio
    async def test_http_error_does_not_leak_api_key(self, caplog):
        handler = lambda request: httpx.Response(500, text="boom")
        resolver = GeocodeResolver(api_key="secret-key", http_client=client_for(handler))

        with caplog.at_level("WARNING"):
            result = await resolver.resolve("Lodi Rd, Delhi")

        assert result == NotFound(reason="HTTP 500")
        assert "Geocoding failed" in caplog.text
        assert "secret-key" not in caplog.text
