from __future__ import annotations

from typing import Callable, Optional

from rowcache.domain.models import Rows
from rowcache.sources.abstract import AbstractRowSource


class ComputedRows(AbstractRowSource):
    """
    Rows produced by a callable, typically an entity's `get_rows()` override.

    The callable runs on every fetch; results may differ between calls.
    """

    name: str = "computed"

    def __init__(self, compute: Callable[[], Optional[Rows]]) -> None:
        self._compute = compute

    def fetch(self) -> Optional[Rows]:
        rows = self._compute()
        return list(rows) if rows is not None else None


__all__ = ["ComputedRows"]
