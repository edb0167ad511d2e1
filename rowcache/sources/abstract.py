"""
Row source interfaces.

A row source answers one question: which rows should the entity table hold?
`fetch()` returns the rows in insertion order, or None when the entity defines
no row-level behavior and the table is built from its schema alone.
"""

from __future__ import annotations

import abc
from typing import Optional, Protocol, runtime_checkable

from rowcache.domain.models import Rows


@runtime_checkable
class RowSource(Protocol):
    """
    Common interface all row sources implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    """

    name: str

    def fetch(self) -> Optional[Rows]:
        """
        Return the rows to materialize.

        Returns
        -------
        Optional[Rows]
            Ordered rows, or None for "schema only".
        """
        ...


class AbstractRowSource(abc.ABC):
    """
    Optional ABC helper for class-based implementations.

    Subclasses set `name` and implement `fetch`.
    """

    name: str

    @abc.abstractmethod
    def fetch(self) -> Optional[Rows]:  # pragma: no cover - interface only
        """Return the rows to materialize."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


__all__ = ["AbstractRowSource", "RowSource"]
