"""Cell cache and synchronization for a single worksheet.

Main Classes:
    CellStore: Sparse local grid of displayed and input values with a dirty set.
    SyncEngine: Reloads a CellStore from the cells feed and saves it back in
        batches.

Quick Start:
    >>> from sheetfeed.cells import CellStore, SyncEngine
    >>> store = CellStore()
    >>> engine = SyncEngine(session, cells_feed_url, worksheet_feed_url)
    >>> engine.reload(store)
    'Sheet1'
    >>> store.set((1, 1), "3")
    >>> engine.save(store, "Sheet1")
    True
"""

from .schemas import CellRect, GridRange
from .store import CellStore, Coord
from .sync import SyncEngine

__all__ = ["CellRect", "GridRange", "CellStore", "Coord", "SyncEngine"]
