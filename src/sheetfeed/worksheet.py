"""Worksheet: cell access backed by a local cache.

Reads are served from a ``CellStore``. The first access to a worksheet whose
store has never been loaded fetches the whole cells feed; that is the only
request the worksheet makes on its own. Writes stay local until ``save()``.

Example:
    >>> ws = session.worksheet_by_url(cells_feed_url)
    >>> ws[1, 1] = "3"
    >>> ws["B1"] = "5"
    >>> ws[1, 3] = "=A1+B1"
    >>> ws.synchronize()
    >>> ws[1, 3]
    '8'
    >>> ws.input_value(1, 3)
    '=RC[-2]+RC[-1]'
"""

import logging
import threading
import weakref
from collections.abc import Callable
from typing import TYPE_CHECKING

from .cells import CellStore, Coord, SyncEngine
from .cells.utils import a1_range_to_grid_range_custom
from .feed import codec
from .shared.config import SheetFeedConfig
from .shared.consts import REL_LIST_FEED
from .shared.exceptions import ProtocolError, SheetFeedError
from .shared.remote import RemoteAccess
from .shared.utils import label_to_coord, parse_cells_feed_url
from .table import Table

if TYPE_CHECKING:
    from .spreadsheet import Spreadsheet

logger = logging.getLogger(__name__)

CellKey = tuple[int, int] | str


class Worksheet:
    """One worksheet of a spreadsheet.

    Attributes:
        session: The session used for every request.
        engine: The sync engine bound to this worksheet's feeds.
    """

    def __init__(
        self,
        session: RemoteAccess,
        cells_feed_url: str,
        title: str | None = None,
        spreadsheet: "Spreadsheet | None" = None,
        resolve_spreadsheet: Callable[[str], "Spreadsheet"] | None = None,
        config: SheetFeedConfig | None = None,
    ) -> None:
        self.session = session
        self._cells_feed_url = cells_feed_url
        self._title = title
        self._spreadsheet_ref = weakref.ref(spreadsheet) if spreadsheet else None
        self._resolve_spreadsheet = resolve_spreadsheet
        self._store = CellStore()
        self._lock = threading.RLock()
        self.engine = SyncEngine(
            session, cells_feed_url, self.worksheet_feed_url, config
        )

    def __repr__(self) -> str:
        fields = f"cells_feed_url={self._cells_feed_url!r}"
        if self._title is not None:
            fields += f", title={self._title!r}"
        return f"<{type(self).__name__} {fields}>"

    @property
    def cells_feed_url(self) -> str:
        return self._cells_feed_url

    @property
    def worksheet_feed_url(self) -> str:
        """Metadata entry URL, derived from the cells feed URL."""
        key, worksheet_key = parse_cells_feed_url(self._cells_feed_url)
        return (
            f"https://spreadsheets.google.com/feeds/worksheets/{key}"
            f"/private/full/{worksheet_key}"
        )

    @property
    def spreadsheet_key(self) -> str:
        return parse_cells_feed_url(self._cells_feed_url)[0]

    @property
    def spreadsheet(self) -> "Spreadsheet":
        """The spreadsheet this worksheet belongs to.

        Raises:
            SheetFeedError: If it can neither be found nor resolved.
        """
        if self._spreadsheet_ref is not None:
            spreadsheet = self._spreadsheet_ref()
            if spreadsheet is not None:
                return spreadsheet
        if self._resolve_spreadsheet is None:
            raise SheetFeedError(f"No way to resolve the spreadsheet of {self!r}")
        return self._resolve_spreadsheet(self.spreadsheet_key)

    def _ensure_loaded(self) -> None:
        if not self._store.loaded:
            self.reload()

    @staticmethod
    def _coord(key: CellKey) -> Coord:
        if isinstance(key, str):
            return label_to_coord(key)
        row, col = key
        return (row, col)

    # Cells

    def __getitem__(self, key: CellKey) -> str:
        """Displayed value of a cell, ``""`` if empty. Top-left is ``[1, 1]``."""
        with self._lock:
            self._ensure_loaded()
            return self._store.get(self._coord(key))

    def __setitem__(self, key: CellKey, value: str) -> None:
        """Update a cell locally. Nothing is sent until ``save()``.

        Loads the worksheet first if it was never loaded, so this may block
        on a request.
        """
        with self._lock:
            self._ensure_loaded()
            self._store.set(self._coord(key), str(value))

    def input_value(self, row: int, col: int) -> str:
        """Value or formula as entered, e.g. ``"=RC[-2]+RC[-1]"``."""
        with self._lock:
            self._ensure_loaded()
            return self._store.get_input((row, col))

    def num_rows(self) -> int:
        """Row number of the bottom-most non-empty row."""
        with self._lock:
            self._ensure_loaded()
            return self._store.populated_extent()[0]

    def num_cols(self) -> int:
        """Column number of the right-most non-empty column."""
        with self._lock:
            self._ensure_loaded()
            return self._store.populated_extent()[1]

    def rows(self, skip: int = 0) -> tuple[tuple[str, ...], ...]:
        """Snapshot of the populated grid as rows of displayed values.

        The result is 0-based: ``ws.rows()[0][0] == ws[1, 1]``. ``skip`` drops
        that many leading rows.
        """
        with self._lock:
            self._ensure_loaded()
            num_rows, num_cols = self._store.populated_extent()
            return tuple(
                tuple(self._store.get((row, col)) for col in range(1, num_cols + 1))
                for row in range(1 + skip, num_rows + 1)
            )

    def get_range(self, a1_range: str) -> list[list[str]]:
        """Displayed values of a range such as ``"A1:C10"``, ``"B:B"`` or ``"2:2"``.

        Unbounded sides stop at the populated extent. Empty cells are ``""``.
        """
        grid_range = a1_range_to_grid_range_custom(a1_range)
        with self._lock:
            self._ensure_loaded()
            num_rows, num_cols = self._store.populated_extent()
            start_row = grid_range.startRowIndex or 0
            end_row = (
                grid_range.endRowIndex
                if grid_range.endRowIndex is not None
                else num_rows
            )
            start_col = grid_range.startColumnIndex or 0
            end_col = (
                grid_range.endColumnIndex
                if grid_range.endColumnIndex is not None
                else num_cols
            )
            return [
                [self._store.get((r + 1, c + 1)) for c in range(start_col, end_col)]
                for r in range(start_row, end_row)
            ]

    # Metadata

    def max_rows(self) -> int:
        """Number of rows including empty rows."""
        with self._lock:
            self._ensure_loaded()
            return self._store.max_rows

    def set_max_rows(self, rows: int) -> None:
        """Change the number of rows. Sent on the next ``save()``.

        Loads the worksheet first if it was never loaded.
        """
        with self._lock:
            self._ensure_loaded()
            self._store.set_bounds(rows, self._store.max_cols)

    def max_cols(self) -> int:
        """Number of columns including empty columns."""
        with self._lock:
            self._ensure_loaded()
            return self._store.max_cols

    def set_max_cols(self, cols: int) -> None:
        """Change the number of columns. Sent on the next ``save()``.

        Loads the worksheet first if it was never loaded.
        """
        with self._lock:
            self._ensure_loaded()
            self._store.set_bounds(self._store.max_rows, cols)

    def title(self) -> str:
        """Title of the worksheet (its tab label)."""
        with self._lock:
            self._ensure_loaded()
            return self._title or ""

    def set_title(self, title: str) -> None:
        """Rename the worksheet. Sent on the next ``save()``.

        Loads the worksheet first if it was never loaded.
        """
        with self._lock:
            self._ensure_loaded()
            self._title = title
            self._store.mark_meta_dirty()

    # Synchronization

    def reload(self) -> None:
        """Fetch the worksheet again, discarding unsaved changes."""
        with self._lock:
            self._title = self.engine.reload(self._store)

    def save(self) -> bool:
        """Send changes made since the last save or reload.

        Returns:
            True if anything was sent, False if there was nothing to send.
        """
        with self._lock:
            return self.engine.save(self._store, self._title or "")

    def synchronize(self) -> None:
        """Save, then reload to pick up server-evaluated values."""
        with self._lock:
            self.save()
            self.reload()

    def is_dirty(self) -> bool:
        """True if there are unsaved cell or metadata changes."""
        with self._lock:
            return self._store.is_dirty() or self._store.meta_dirty

    # Other feeds

    def delete(self) -> None:
        """Delete the worksheet on the server right away."""
        edit_url = self.engine.fetch_edit_url()
        self.session.request("DELETE", edit_url)
        logger.info(f"Deleted worksheet {self._cells_feed_url}")

    def list_feed_url(self) -> str:
        entry = self.engine.fetch_worksheet_entry()
        url = entry.link(REL_LIST_FEED)
        if not url:
            raise ProtocolError(f"Worksheet entry has no list feed link: {self.worksheet_feed_url}")
        return url

    def add_table(self, table_title: str, summary: str, columns: dict[str, str]) -> Table:
        """Create a table over this worksheet (deprecated feed).

        Args:
            table_title: Title of the new table.
            summary: Description of the table.
            columns: Mapping of column letter to column name.
        """
        spreadsheet = self.spreadsheet
        body = codec.build_table_entry(table_title, summary, self.title(), columns)
        doc = self.session.request("POST", spreadsheet.tables_feed_url, data=body)
        tables = codec.decode_table_entries(doc)
        if not tables:
            raise ProtocolError("Table creation returned no entry")
        return Table(self.session, tables[0])

    def tables(self) -> list[Table]:
        title = self.title()
        return [t for t in self.spreadsheet.tables() if t.worksheet_title == title]
