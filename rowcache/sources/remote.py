"""
Remote row source: rows fetched with a GET against the entity's base URI.
"""

from __future__ import annotations

from typing import Any, Callable

from rowcache.domain.errors import RemoteFetchError
from rowcache.domain.models import Rows
from rowcache.infrastructure.api_client import ApiClient, send_request
from rowcache.sources.abstract import AbstractRowSource
from rowcache.utils.logging import get_logger

log = get_logger(__name__)


def _as_rows(body: Any) -> Rows:
    """A JSON array is the row list; a single object is one row."""
    if body is None:
        return []
    if isinstance(body, dict):
        return [body]
    if isinstance(body, list) and all(isinstance(item, dict) for item in body):
        return list(body)
    raise RemoteFetchError(f"expected a JSON array of objects, got {type(body).__name__}", verb="get")


class RemoteRows(AbstractRowSource):
    """
    Issue `GET base_uri` and decode the JSON body as rows.

    The client is resolved lazily through `client_factory`, so constructing
    the source performs no I/O.
    """

    name: str = "remote"

    def __init__(self, client_factory: Callable[[], ApiClient], base_uri: str) -> None:
        self._client_factory = client_factory
        self.base_uri = base_uri

    def fetch(self) -> Rows:
        """
        Raises
        ------
        RemoteFetchError
            On a failed request or a body that is not row-shaped.
        """
        rows = _as_rows(send_request(self._client_factory(), "get", self.base_uri))
        log.info("Fetched remote rows", extra={"base_uri": self.base_uri, "rows": len(rows)})
        return rows

    def __repr__(self) -> str:
        return f"RemoteRows(base_uri={self.base_uri!r})"


__all__ = ["RemoteRows"]
