from . import codec
from .schemas import (
    BatchResult,
    CellEntry,
    CellsFeed,
    CellUpdate,
    FeedEntry,
    TableEntry,
    WorksheetEntry,
)

__all__ = [
    "codec",
    "BatchResult",
    "CellEntry",
    "CellsFeed",
    "CellUpdate",
    "FeedEntry",
    "TableEntry",
    "WorksheetEntry",
]
