from __future__ import annotations

import json

import httpx
import pytest

from rowcache.config import Settings
from rowcache.domain.errors import RemoteFetchError
from rowcache.infrastructure.api_client import ApiClient, send_request

BASE_URL = "https://api.example.test"
TOKEN = "secret-token"
HTTP_OK = 200
HTTP_NO_CONTENT = 204
HTTP_NOT_FOUND = 404


class _RecordingHandler:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, status: int = HTTP_OK, payload=None, content: bytes | None = None) -> None:
        self.status = status
        self.payload = payload
        self.content = content
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status, content=self.content)
        if self.payload is None:
            return httpx.Response(self.status)
        return httpx.Response(self.status, json=self.payload)


def _client(handler, token: str = TOKEN) -> ApiClient:
    return ApiClient(BASE_URL, token=token, transport=httpx.MockTransport(handler))


def test_client_sends_json_and_bearer_headers() -> None:
    handler = _RecordingHandler(payload=[])

    send_request(_client(handler), "get", "planets")

    request = handler.requests[0]
    assert request.method == "GET"
    assert request.url == httpx.URL(f"{BASE_URL}/planets")
    assert request.headers["Authorization"] == f"Bearer {TOKEN}"
    assert request.headers["Accept"] == "application/json"


def test_client_omits_authorization_without_token() -> None:
    handler = _RecordingHandler(payload=[])

    send_request(_client(handler, token=""), "get", "planets")

    assert "Authorization" not in handler.requests[0].headers


def test_post_serializes_body_as_json() -> None:
    handler = _RecordingHandler(status=201, payload={"id": 3})

    result = send_request(_client(handler), "post", "planets", {"name": "Earth", "radius": 6371.0})

    assert result == {"id": 3}
    assert handler.requests[0].method == "POST"
    assert json.loads(handler.requests[0].content) == {"name": "Earth", "radius": 6371.0}


def test_empty_body_decodes_to_none() -> None:
    handler = _RecordingHandler(status=HTTP_NO_CONTENT)

    assert send_request(_client(handler), "delete", "planets/3") is None


def test_error_status_raises_with_status_and_reason() -> None:
    handler = _RecordingHandler(status=HTTP_NOT_FOUND, payload={"message": "missing"})

    with pytest.raises(RemoteFetchError) as excinfo:
        send_request(_client(handler), "get", "planets")

    error = excinfo.value
    assert error.status == HTTP_NOT_FOUND
    assert error.reason == "Not Found"
    assert error.verb == "get"
    assert "HTTP 404" in str(error)


def test_transport_failure_raises_without_status() -> None:
    def _unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RemoteFetchError) as excinfo:
        send_request(_client(_unreachable), "get", "planets")

    assert excinfo.value.status is None


def test_invalid_json_body_raises() -> None:
    handler = _RecordingHandler(content=b"<html>oops</html>")

    with pytest.raises(RemoteFetchError):
        send_request(_client(handler), "get", "planets")


def test_unknown_verb_is_rejected() -> None:
    with pytest.raises(ValueError):
        _client(_RecordingHandler()).request("patch", "planets")


def test_from_settings_uses_configured_url_and_token() -> None:
    settings = Settings(api_url=BASE_URL, api_token=TOKEN, api_timeout_seconds=2.5)
    handler = _RecordingHandler(payload=[])

    with ApiClient.from_settings(settings, transport=httpx.MockTransport(handler)) as client:
        send_request(client, "get", "moons")

    assert handler.requests[0].url == httpx.URL(f"{BASE_URL}/moons")
    assert handler.requests[0].headers["Authorization"] == f"Bearer {TOKEN}"
