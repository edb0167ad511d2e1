"""
Row sources package for rowcache.

Re-exports the row source interfaces, the concrete sources, and the selection
policy so downstream code can import from `rowcache.sources` directly.
"""

from rowcache.sources.abstract import AbstractRowSource, RowSource
from rowcache.sources.computed import ComputedRows
from rowcache.sources.remote import RemoteRows
from rowcache.sources.selection import select_row_source
from rowcache.sources.static import StaticRows

__all__ = [
    # Abstracts
    "AbstractRowSource",
    "RowSource",
    # Concrete sources
    "ComputedRows",
    "RemoteRows",
    "StaticRows",
    # Selection
    "select_row_source",
]
