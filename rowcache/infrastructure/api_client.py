"""
HTTP client for remote-backed entities.

Wraps an `httpx.Client` preconfigured with the API base URL and a static
bearer token. `send_request()` is the single error contract: any non-success
response or transport failure surfaces as `RemoteFetchError`. Nothing is
retried.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from pydantic_core import to_jsonable_python

from rowcache.config import Settings, get_settings
from rowcache.domain.errors import RemoteFetchError
from rowcache.utils.logging import get_logger

log = get_logger(__name__)

VERBS = ("get", "post", "put", "delete")


class ApiClient:
    """
    Thin synchronous API client.

    Parameters
    ----------
    base_url : str
        Root URL every request path is resolved against.
    token : str
        Bearer token sent with every request; omitted when empty.
    timeout : float
        Per-request timeout in seconds.
    transport : httpx.BaseTransport, optional
        Custom transport (tests use `httpx.MockTransport`).
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "ApiClient":
        settings = settings or get_settings()
        return cls(
            base_url=settings.api_url,
            token=settings.api_token,
            timeout=settings.api_timeout_seconds,
            transport=transport,
        )

    @property
    def headers(self) -> httpx.Headers:
        return self._client.headers

    def request(self, verb: str, path: str, body: Any = None) -> httpx.Response:
        verb = verb.lower()
        if verb not in VERBS:
            raise ValueError(f"Unsupported HTTP verb '{verb}'. Expected one of: {', '.join(VERBS)}")
        if body is None or verb == "get":
            return self._client.request(verb.upper(), path)
        return self._client.request(verb.upper(), path, json=to_jsonable_python(body))

    def get(self, path: str) -> httpx.Response:
        return self.request("get", path)

    def post(self, path: str, body: Any = None) -> httpx.Response:
        return self.request("post", path, body)

    def put(self, path: str, body: Any = None) -> httpx.Response:
        return self.request("put", path, body)

    def delete(self, path: str, body: Any = None) -> httpx.Response:
        return self.request("delete", path, body)

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def send_request(client: ApiClient, verb: str, path: str, body: Any = None) -> Any:
    """
    Send one request and return the decoded JSON body (None when empty).

    Raises
    ------
    RemoteFetchError
        On a non-2xx response (carries status and reason phrase) or when the
        transport fails before a response arrives (status is None).
    """
    log.debug("API request", extra={"verb": verb, "path": path})
    try:
        response = client.request(verb, path, body)
    except httpx.HTTPError as exc:
        log.error("API transport failure", extra={"verb": verb, "path": path, "error": str(exc)})
        raise RemoteFetchError(str(exc) or type(exc).__name__, status=None, verb=verb) from exc

    if not response.is_success:
        log.error(
            "API response",
            extra={"verb": verb, "status": response.status_code, "reason": response.reason_phrase},
        )
        raise RemoteFetchError(response.reason_phrase, status=response.status_code, verb=verb)

    log.debug("API response", extra={"verb": verb, "status": response.status_code})
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise RemoteFetchError(
            f"invalid JSON body: {exc}", status=response.status_code, verb=verb
        ) from exc


__all__ = ["ApiClient", "VERBS", "send_request"]
