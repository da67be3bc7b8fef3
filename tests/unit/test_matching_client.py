"""
Unit tests for the matching service client.
"""

import httpx
import pytest

from matching import MatchingClient
from utils.exceptions import MatchingServiceError


def _client(handler, base_url="http://matching.local/"):
    return MatchingClient(
        base_url=base_url,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_broadcast_returns_count():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"count": 7})

    result = await _client(handler).broadcast("b1")

    assert result.count == 7
    assert seen == {"method": "POST", "url": "http://matching.local/bookings/b1/broadcast"}


@pytest.mark.asyncio
async def test_missing_count_reads_as_zero():
    result = await _client(lambda request: httpx.Response(200, json={})).broadcast("b1")
    assert result.count == 0


@pytest.mark.asyncio
async def test_empty_body_reads_as_zero():
    result = await _client(lambda request: httpx.Response(204)).broadcast("b1")
    assert result.count == 0


@pytest.mark.asyncio
async def test_error_status_raises():
    with pytest.raises(MatchingServiceError, match="status 503"):
        await _client(lambda request: httpx.Response(503)).broadcast("b1")


@pytest.mark.asyncio
async def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(MatchingServiceError, match="connection refused"):
        await _client(handler).broadcast("b1")


@pytest.mark.asyncio
async def test_malformed_payload_raises():
    response = httpx.Response(200, content=b"not json")
    with pytest.raises(MatchingServiceError, match="Unreadable"):
        await _client(lambda request: response).broadcast("b1")


@pytest.mark.asyncio
async def test_unconfigured_url_raises():
    client = MatchingClient(base_url="", http_client=httpx.AsyncClient())
    client.base_url = ""

    with pytest.raises(MatchingServiceError, match="not configured"):
        await client.broadcast("b1")
