"""Data schemas for decoded feed documents.

The codec turns every Atom document the server returns into one of these
Pydantic models, so nothing outside ``sheetfeed.feed`` reads raw XML.

Classes:
    FeedEntry: A generic Atom entry (title, id, links).
    CellEntry: One ``gs:cell`` entry of a cells feed.
    CellsFeed: A whole cells feed with its grid size.
    WorksheetEntry: Metadata entry of a worksheet.
    CellUpdate: One cell update to be sent in a batch request.
    BatchResult: One per-item result of a batch response.
    TableEntry: Entry of the deprecated tables feed.
"""

from pydantic import BaseModel, Field


class FeedEntry(BaseModel):
    """A generic Atom entry.

    Attributes:
        title: Text of the ``title`` element.
        entry_id: Text of the ``id`` element.
        links: Mapping of link ``rel`` to ``href``. When several links share a
            rel, the first one wins.
    """

    title: str = ""
    entry_id: str | None = None
    links: dict[str, str] = Field(default_factory=dict)

    def link(self, rel: str) -> str | None:
        return self.links.get(rel)


class CellEntry(BaseModel):
    """One cell of a cells feed.

    ``displayed`` is what the grid shows (``"8"``), ``input_value`` is what
    was typed (``"=RC[-2]+RC[-1]"``). ``entry_id`` and ``edit_url`` are only
    of interest when preparing a batch update.
    """

    row: int = Field(gt=0)
    col: int = Field(gt=0)
    displayed: str = ""
    input_value: str = ""
    entry_id: str | None = None
    edit_url: str | None = None

    @property
    def coord(self) -> tuple[int, int]:
        return (self.row, self.col)


class CellsFeed(BaseModel):
    title: str = ""
    row_count: int = Field(ge=0)
    col_count: int = Field(ge=0)
    entries: list[CellEntry] = Field(default_factory=list)


class WorksheetEntry(FeedEntry):
    row_count: int | None = None
    col_count: int | None = None


class CellUpdate(BaseModel):
    row: int = Field(gt=0)
    col: int = Field(gt=0)
    entry_id: str
    edit_url: str
    input_value: str

    @property
    def batch_id(self) -> str:
        return f"{self.row},{self.col}"


class BatchResult(BaseModel):
    """One result entry of a batch response.

    Attributes:
        batch_id: The correlation id echoed back from the request item.
        status_code: HTTP-like status of the sub-operation.
        reason: Server-supplied reason, for failures or interruptions.
        interrupted: True when the server aborted the whole batch here.
    """

    batch_id: str | None = None
    status_code: int | None = None
    reason: str = ""
    interrupted: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300

    @property
    def coord(self) -> tuple[int, int] | None:
        if not self.batch_id:
            return None
        row, sep, col = self.batch_id.partition(",")
        if not sep or not row.strip().isdigit() or not col.strip().isdigit():
            return None
        return (int(row), int(col))


class TableEntry(BaseModel):
    worksheet_title: str
    records_url: str
