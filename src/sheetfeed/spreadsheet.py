"""Spreadsheet: a document holding worksheets."""

import logging
from pathlib import Path

from .feed import codec
from .feed.schemas import FeedEntry
from .shared.config import SheetFeedConfig
from .shared.consts import (
    DOCUMENT_LIST_URL,
    DOCUMENTS_FEED_URL,
    EXPORT_URL,
    GDATA_V3_HEADER,
    REL_ALTERNATE,
    REL_CELLS_FEED,
    REL_EDIT,
    REL_WORKSHEETS_FEED,
    SPREADSHEETS_FEED_URL,
    SUPPORTED_EXPORT_FORMATS,
)
from .shared.exceptions import ProtocolError
from .shared.remote import RemoteAccess
from .shared.utils import encode_query, parse_worksheets_feed_url
from .table import Table, warn_deprecated
from .worksheet import Worksheet

logger = logging.getLogger(__name__)


def require_link(entry: FeedEntry, rel: str) -> str:
    href = entry.link(rel)
    if not href:
        raise ProtocolError(f"Entry {entry.title!r} has no link with rel={rel!r}")
    return href


class Spreadsheet:
    """Use the methods of ``Session`` to get a Spreadsheet.

    Attributes:
        session: The session used for every request.
        worksheets_feed_url: URL of the worksheet-based feed.
    """

    def __init__(
        self,
        session: RemoteAccess,
        worksheets_feed_url: str,
        title: str | None = None,
        config: SheetFeedConfig | None = None,
    ) -> None:
        self.session = session
        self.worksheets_feed_url = worksheets_feed_url
        self.config = config or getattr(session, "config", None) or SheetFeedConfig()
        self._title = title
        self._spreadsheet_feed_entry: FeedEntry | None = None
        self._document_feed_entry: FeedEntry | None = None

    def __repr__(self) -> str:
        fields = f"worksheets_feed_url={self.worksheets_feed_url!r}"
        if self._title is not None:
            fields += f", title={self._title!r}"
        return f"<{type(self).__name__} {fields}>"

    @property
    def key(self) -> str:
        return parse_worksheets_feed_url(self.worksheets_feed_url)

    @property
    def spreadsheet_feed_url(self) -> str:
        return f"{SPREADSHEETS_FEED_URL}/{self.key}"

    @property
    def document_feed_url(self) -> str:
        return f"{DOCUMENTS_FEED_URL}/spreadsheet%3A{self.key}"

    @property
    def tables_feed_url(self) -> str:
        warn_deprecated()
        return f"https://spreadsheets.google.com/feeds/{self.key}/tables"

    def spreadsheet_feed_entry(self, reload: bool = False) -> FeedEntry:
        if self._spreadsheet_feed_entry is None or reload:
            doc = self.session.request("GET", self.spreadsheet_feed_url)
            self._spreadsheet_feed_entry = codec.decode_first_entry(doc)
        return self._spreadsheet_feed_entry

    def document_feed_entry(self, reload: bool = False) -> FeedEntry:
        if self._document_feed_entry is None or reload:
            doc = self.session.request("GET", self.document_feed_url, auth="writely")
            self._document_feed_entry = codec.decode_first_entry(doc)
        return self._document_feed_entry

    def title(self, reload: bool = False) -> str:
        if self._title is None or reload:
            self._title = self.spreadsheet_feed_entry(reload=reload).title
        return self._title

    def human_url(self) -> str:
        """URL to open the spreadsheet in a browser."""
        # The spreadsheet feed returns a wrong URL for hosted accounts.
        return require_link(self.document_feed_entry(), REL_ALTERNATE)

    def worksheets(self) -> list[Worksheet]:
        doc = self.session.request("GET", self.worksheets_feed_url)
        return [
            self._worksheet(require_link(entry, REL_CELLS_FEED), entry.title)
            for entry in codec.decode_entries(doc)
        ]

    def worksheet_by_title(self, title: str) -> Worksheet | None:
        """First worksheet with the given title, or None."""
        doc = self.session.request("GET", self.worksheets_feed_url)
        for entry in codec.decode_entries(doc):
            if entry.title == title:
                return self._worksheet(require_link(entry, REL_CELLS_FEED), entry.title)
        return None

    def add_worksheet(self, title: str, max_rows: int = 100, max_cols: int = 20) -> Worksheet:
        body = codec.build_worksheet_entry(title, max_rows, max_cols)
        doc = self.session.request("POST", self.worksheets_feed_url, data=body)
        entry = codec.decode_first_entry(doc)
        logger.info(f"Added worksheet '{title}' ({max_rows}x{max_cols})")
        return self._worksheet(require_link(entry, REL_CELLS_FEED), title)

    def _worksheet(self, cells_feed_url: str, title: str) -> Worksheet:
        resolver = getattr(self.session, "spreadsheet_by_key", None)
        return Worksheet(
            self.session,
            cells_feed_url,
            title=title,
            spreadsheet=self,
            resolve_spreadsheet=resolver,
            config=self.config,
        )

    def rename(self, title: str) -> None:
        doc = self.session.request("GET", self.document_feed_url, auth="writely")
        edit_url = require_link(codec.decode_first_entry(doc), REL_EDIT)
        body = codec.build_spreadsheet_entry(title)
        self.session.request("PUT", edit_url, data=body, auth="writely")
        self._title = title
        self._document_feed_entry = None

    def duplicate(self, new_title: str | None = None) -> "Spreadsheet":
        """Create a copy of this spreadsheet on the server."""
        if new_title is None:
            current = self.title()
            new_title = f"Copy of {current}" if current else "Untitled"
        body = codec.build_document_reference(self.document_feed_url, new_title)
        doc = self.session.request(
            "POST", DOCUMENT_LIST_URL, data=body, header=dict(GDATA_V3_HEADER), auth="writely"
        )
        url = require_link(codec.decode_first_entry(doc), REL_WORKSHEETS_FEED)
        logger.info(f"Duplicated spreadsheet {self.key} as '{new_title}'")
        return Spreadsheet(self.session, url, new_title, self.config)

    def delete(self, permanent: bool = False) -> None:
        """Move to the trash, or delete for good when ``permanent``."""
        url = self.document_feed_url + ("?delete=true" if permanent else "")
        self.session.request("DELETE", url, auth="writely", header={"If-Match": "*"})
        logger.info(f"Deleted spreadsheet {self.key} (permanent={permanent})")

    def export_as_string(self, format: str, worksheet_index: int | None = None) -> str:
        """Export as text. Formats such as csv export one worksheet only."""
        return self.session.request(
            "GET", self._export_url(format, worksheet_index), response_type="text"
        )

    def export_as_file(
        self,
        local_path: str | Path,
        format: str | None = None,
        worksheet_index: int | None = None,
    ) -> None:
        """Export to a local file, guessing ``format`` from its extension.

        Raises:
            ValueError: If the format cannot be guessed from the file name.
        """
        local_path = Path(local_path)
        if format is None:
            format = local_path.suffix.lstrip(".")
            if format not in SUPPORTED_EXPORT_FORMATS:
                raise ValueError(
                    f"Cannot guess format from the file name: {local_path}\n"
                    "Specify format argument explicitly."
                )
        content = self.session.request(
            "GET", self._export_url(format, worksheet_index), response_type="raw"
        )
        local_path.write_bytes(content)

    def _export_url(self, format: str, worksheet_index: int | None) -> str:
        params = {"key": self.key, "exportFormat": format}
        if worksheet_index is not None:
            params["gid"] = str(worksheet_index)
        return f"{EXPORT_URL}?{encode_query(params)}"

    def tables(self) -> list[Table]:
        doc = self.session.request("GET", self.tables_feed_url)
        return [Table(self.session, entry) for entry in codec.decode_table_entries(doc)]
