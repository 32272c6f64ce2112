"""Tests for cover lookup clients."""
import asyncio

import httpx
import requests

from bookseed.async_client import AsyncCoverClient
from bookseed.client import CoverClient, extract_cover_url

VOLUME_RESPONSE = {
    "items": [
        {
            "volumeInfo": {
                "imageLinks": {
                    "thumbnail": "http://books.google.com/thumb",
                    "medium": "http://books.google.com/medium",
                }
            }
        }
    ]
}


class FakeResponse:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.text = ""

    def json(self):
        return self._payload


def test_extract_cover_url_prefers_larger_https():
    """Test size preference and scheme rewrite."""
    assert extract_cover_url(VOLUME_RESPONSE) == "https://books.google.com/medium"


def test_extract_cover_url_missing():
    """Test responses without usable images."""
    assert extract_cover_url(None) is None
    assert extract_cover_url({"items": []}) is None
    assert extract_cover_url({"items": [{"volumeInfo": {"imageLinks": {"large": "x"}}}]}) is None


def test_lookup_cover_success(monkeypatch):
    """Test a successful lookup and the query parameters."""
    client = CoverClient(api_key="k", max_retries=2)
    seen = {}

    def fake_get(url, params, timeout):
        seen.update(params)
        return FakeResponse(200, VOLUME_RESPONSE)

    monkeypatch.setattr(client.session, "get", fake_get)

    assert client.lookup_cover("Deep Learning", "Ian Goodfellow") == "https://books.google.com/medium"
    assert seen["q"] == "Deep Learning Ian Goodfellow"
    assert seen["maxResults"] == 1
    assert seen["key"] == "k"


def test_lookup_cover_retries_then_gives_up(monkeypatch):
    """Test that server errors are retried and end in None."""
    client = CoverClient(max_retries=3)
    attempts = []

    def fake_get(url, params, timeout):
        attempts.append(1)
        return FakeResponse(503)

    monkeypatch.setattr(client.session, "get", fake_get)
    monkeypatch.setattr(client, "_backoff", lambda attempt: None)

    assert client.lookup_cover("T", "A") is None
    assert len(attempts) == 3


def test_lookup_cover_connection_error(monkeypatch):
    """Test that network failures never raise."""
    client = CoverClient(max_retries=2)

    def fake_get(url, params, timeout):
        raise requests.exceptions.ConnectionError("down")

    monkeypatch.setattr(client.session, "get", fake_get)
    monkeypatch.setattr(client, "_backoff", lambda attempt: None)

    assert client.lookup_cover("T", "A") is None


def test_lookup_cover_client_error_not_retried(monkeypatch):
    """Test that 4xx responses return None immediately."""
    client = CoverClient(max_retries=3)
    attempts = []

    def fake_get(url, params, timeout):
        attempts.append(1)
        return FakeResponse(403)

    monkeypatch.setattr(client.session, "get", fake_get)

    assert client.lookup_cover("T", "A") is None
    assert len(attempts) == 1


def test_async_lookup_batch():
    """Test parallel lookups through a mock transport."""
    def handler(request):
        if "Missing" in request.url.params["q"]:
            return httpx.Response(500)
        return httpx.Response(200, json=VOLUME_RESPONSE)

    async def run():
        async with AsyncCoverClient(transport=httpx.MockTransport(handler)) as client:
            return await client.lookup_batch([("Found", "A"), ("Missing", "B")])

    assert asyncio.run(run()) == ["https://books.google.com/medium", None]


def test_extract_cover_url_tolerates_null_and_odd_shapes():
    """Test that null or non-object parts of a response mean no cover."""
    assert extract_cover_url({"items": [{"volumeInfo": None}]}) is None
    assert extract_cover_url({"items": [{"volumeInfo": {"imageLinks": None}}]}) is None
    assert extract_cover_url({"items": [None]}) is None
    assert extract_cover_url({"items": "nope"}) is None
    assert extract_cover_url(["not", "an", "object"]) is None
    assert extract_cover_url("text") is None


def test_lookup_cover_null_volume_info(monkeypatch):
    """Test that a hit without volume info yields None instead of raising."""
    client = CoverClient(max_retries=1)
    monkeypatch.setattr(
        client.session, "get",
        lambda url, params, timeout: FakeResponse(200, {"items": [{"volumeInfo": None}]})
    )

    assert client.lookup_cover("T", "A") is None


def test_async_lookup_non_object_body():
    """Test that a JSON array body is treated as a failed lookup."""
    def handler(request):
        return httpx.Response(200, json=["unexpected"])

    async def run():
        async with AsyncCoverClient(transport=httpx.MockTransport(handler)) as client:
            return await client.lookup_cover("T", "A")

    assert asyncio.run(run()) is None
