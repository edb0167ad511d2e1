from __future__ import annotations

from typing import Iterable

from rowcache.domain.models import Row, Rows
from rowcache.sources.abstract import AbstractRowSource


class StaticRows(AbstractRowSource):
    """
    A fixed row collection declared on the entity class.

    Returns a fresh list each call so callers cannot mutate the declaration.
    """

    name: str = "static"

    def __init__(self, rows: Iterable[Row]) -> None:
        self._rows: Rows = [dict(row) for row in rows]

    def fetch(self) -> Rows:
        return [dict(row) for row in self._rows]

    def __len__(self) -> int:
        return len(self._rows)


__all__ = ["StaticRows"]
