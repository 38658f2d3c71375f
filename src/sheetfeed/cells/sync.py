"""Synchronization of a CellStore with the remote cells feed.

Reload pulls the whole cells feed and replaces the store. Save pushes the
worksheet metadata when it changed, then the dirty cells through the batch
endpoint:

1. One read of the dirty cells' bounding rectangle with ``return-empty=true``.
   The server only reveals a cell's id and edit link for cells that have an
   entry, and this query makes it synthesize entries for empty cells too.
2. The dirty cells, in ascending order, are split into chunks of
   ``batch_chunk_size`` and each chunk is posted as one batch feed.
3. Every result of a chunk is checked before the next chunk is sent.

A save is not atomic: chunks posted before a failure stay applied on the
server, while the local dirty set is only cleared once every chunk succeeded.
"""

import logging

from ..feed import codec
from ..feed.schemas import BatchResult, CellEntry, CellUpdate, WorksheetEntry
from ..shared.config import SheetFeedConfig
from ..shared.exceptions import BatchInterrupted, CellUpdateFailed, ProtocolError
from ..shared.remote import RemoteAccess
from ..shared.utils import encode_query, split_list
from .schemas import CellRect
from .store import CellStore, Coord

logger = logging.getLogger(__name__)


class SyncEngine:
    """Moves cell state between a CellStore and the server.

    Attributes:
        remote: The session used for every request.
        cells_feed_url: URL of the worksheet's cells feed.
        worksheet_feed_url: URL of the worksheet's metadata entry.
        chunk_size: Maximum number of cell updates per batch request.
    """

    def __init__(
        self,
        remote: RemoteAccess,
        cells_feed_url: str,
        worksheet_feed_url: str,
        config: SheetFeedConfig | None = None,
    ) -> None:
        self.remote = remote
        self.cells_feed_url = cells_feed_url
        self.worksheet_feed_url = worksheet_feed_url
        self.chunk_size = (config or SheetFeedConfig()).batch_chunk_size

    def reload(self, store: CellStore) -> str:
        """Replace the store with the server's cells feed.

        Returns:
            The worksheet title found in the feed.

        Raises:
            TransportError: If the request fails.
            ProtocolError: If the feed cannot be decoded. The store is left
                untouched.
        """
        doc = self.remote.request("GET", self.cells_feed_url)
        feed = codec.decode_cells_feed(doc)

        displayed = {entry.coord: entry.displayed for entry in feed.entries}
        input_values = {entry.coord: entry.input_value for entry in feed.entries}
        store.replace_all(displayed, input_values, feed.row_count, feed.col_count)

        logger.info(
            f"Loaded {len(feed.entries)} cell(s) of '{feed.title}' "
            f"({feed.row_count}x{feed.col_count})"
        )
        return feed.title

    def fetch_worksheet_entry(self) -> WorksheetEntry:
        doc = self.remote.request("GET", self.worksheet_feed_url)
        return codec.decode_worksheet_entry(doc)

    def fetch_edit_url(self) -> str:
        """Edit link of the worksheet entry, which only the server can supply.

        Raises:
            ProtocolError: If the entry has no edit link.
        """
        edit_url = self.fetch_worksheet_entry().link("edit")
        if not edit_url:
            raise ProtocolError(
                f"Worksheet entry has no edit link: {self.worksheet_feed_url}"
            )
        return edit_url

    def save(self, store: CellStore, title: str) -> bool:
        """Send pending metadata and cell changes to the server.

        Args:
            store: The store to drain.
            title: Current worksheet title, sent along with the grid size.

        Returns:
            True if anything was sent, False if there was nothing to send.

        Raises:
            TransportError: If a request fails.
            ProtocolError: If a response cannot be understood.
            BatchInterrupted: If the server aborted a batch.
            CellUpdateFailed: If the server rejected a cell update.
        """
        sent = False

        if store.meta_dirty:
            self._save_metadata(store, title)
            sent = True

        dirty = store.dirty_coords()
        if dirty:
            self._save_cells(store, dirty)
            store.clear_dirty()
            sent = True

        if not sent:
            logger.debug("No changes to send")
        return sent

    def _save_metadata(self, store: CellStore, title: str) -> None:
        edit_url = self.fetch_edit_url()
        max_rows, max_cols = store.bounds()
        body = codec.build_worksheet_entry(title, max_rows, max_cols)
        self.remote.request("PUT", edit_url, data=body)
        store.clear_meta_dirty()
        logger.info(f"Updated worksheet '{title}' to {max_rows}x{max_cols}")

    def _fetch_cell_handles(self, coords: list[Coord]) -> dict[Coord, CellEntry]:
        rect = CellRect.enclosing(coords)
        url = f"{self.cells_feed_url}?{encode_query(rect.query_params())}"
        doc = self.remote.request("GET", url)
        return {entry.coord: entry for entry in codec.decode_cell_entries(doc)}

    def _build_updates(self, store: CellStore, coords: list[Coord]) -> list[CellUpdate]:
        handles = self._fetch_cell_handles(coords)

        updates: list[CellUpdate] = []
        for coord in coords:
            entry = handles.get(coord)
            if entry is None or not entry.entry_id or not entry.edit_url:
                row, col = coord
                raise ProtocolError(f"Server returned no edit handle for cell ({row}, {col})")
            updates.append(
                CellUpdate(
                    row=entry.row,
                    col=entry.col,
                    entry_id=entry.entry_id,
                    edit_url=entry.edit_url,
                    input_value=store.get_input(coord),
                )
            )
        return updates

    def _save_cells(self, store: CellStore, coords: list[Coord]) -> None:
        updates = self._build_updates(store, coords)
        chunks = split_list(updates, self.chunk_size)
        logger.info(f"Saving {len(updates)} cell(s) in {len(chunks)} batch(es)")

        batch_url = f"{self.cells_feed_url}/batch"
        for index, chunk in enumerate(chunks, 1):
            body = codec.build_cells_batch(self.cells_feed_url, chunk)
            doc = self.remote.request("POST", batch_url, data=body)
            self._check_results(codec.decode_batch_results(doc))
            logger.debug(f"Batch {index}/{len(chunks)} applied ({len(chunk)} cell(s))")

    def _check_results(self, results: list[BatchResult]) -> None:
        """Raise if the server aborted the batch or rejected any item.

        An interruption is fatal at once. Rejections are collected over the
        whole chunk and reported through the first one.
        """
        failures: list[tuple[Coord, str]] = []
        for result in results:
            if result.interrupted:
                logger.error(f"Batch interrupted: {result.reason}")
                raise BatchInterrupted(result.reason)
            if result.succeeded:
                continue
            coord = result.coord
            if coord is None:
                raise ProtocolError(
                    f"Batch result has an unknown id {result.batch_id!r}: {result.reason}"
                )
            failures.append((coord, result.reason))

        if failures:
            for (row, col), reason in failures:
                logger.error(f"Cell ({row}, {col}) was rejected: {reason}")
            coord, reason = failures[0]
            raise CellUpdateFailed(coord, reason, failures)
