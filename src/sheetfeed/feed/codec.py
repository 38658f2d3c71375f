"""Atom/GData codec.

Decoders take an ``lxml`` element returned by the session and produce the
models in ``sheetfeed.feed.schemas``; builders produce request bodies as
UTF-8 bytes. Malformed or incomplete documents raise ``ProtocolError``.
"""

import logging

from lxml import etree
from pydantic import ValidationError

from ..shared.consts import (
    ATOM_NS,
    BATCH_NS,
    GS_NS,
    KIND_SCHEME,
    KIND_SPREADSHEET,
    NSMAP,
)
from ..shared.exceptions import ProtocolError
from .schemas import (
    BatchResult,
    CellEntry,
    CellsFeed,
    CellUpdate,
    FeedEntry,
    TableEntry,
    WorksheetEntry,
)

logger = logging.getLogger(__name__)

_ATOM = f"{{{ATOM_NS}}}"
_GS = f"{{{GS_NS}}}"
_BATCH = f"{{{BATCH_NS}}}"


def parse_document(content: bytes) -> etree._Element:
    """Parse a response body into an element tree root.

    Raises:
        ProtocolError: If the body is not well-formed XML.
    """
    try:
        return etree.fromstring(content)
    except etree.XMLSyntaxError as e:
        raise ProtocolError(f"Response is not well-formed XML: {e}") from e


def to_bytes(element: etree._Element) -> bytes:
    return etree.tostring(element, encoding="utf-8", xml_declaration=False)


# Decoding


def _entries(doc: etree._Element) -> list[etree._Element]:
    if doc.tag == f"{_ATOM}entry":
        return [doc]
    return doc.findall(f"{_ATOM}entry")


def _text(element: etree._Element, path: str) -> str:
    found = element.find(path)
    if found is None or found.text is None:
        return ""
    return found.text


def _int_text(element: etree._Element, path: str) -> int | None:
    text = _text(element, path).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError as e:
        raise ProtocolError(f"Expected an integer in {path}, got {text!r}") from e


def _links(entry: etree._Element) -> dict[str, str]:
    links: dict[str, str] = {}
    for link in entry.findall(f"{_ATOM}link"):
        rel = link.get("rel")
        href = link.get("href")
        if rel and href and rel not in links:
            links[rel] = href
    return links


def decode_entry(entry: etree._Element) -> FeedEntry:
    return FeedEntry(
        title=_text(entry, f"{_ATOM}title"),
        entry_id=_text(entry, f"{_ATOM}id") or None,
        links=_links(entry),
    )


def decode_entries(doc: etree._Element) -> list[FeedEntry]:
    return [decode_entry(entry) for entry in _entries(doc)]


def decode_first_entry(doc: etree._Element) -> FeedEntry:
    entries = _entries(doc)
    if not entries:
        raise ProtocolError("Response contains no entry")
    return decode_entry(entries[0])


def decode_worksheet_entry(doc: etree._Element) -> WorksheetEntry:
    entries = _entries(doc)
    if not entries:
        raise ProtocolError("Worksheet response contains no entry")
    entry = entries[0]
    base = decode_entry(entry)
    return WorksheetEntry(
        **base.model_dump(),
        row_count=_int_text(entry, f"{_GS}rowCount"),
        col_count=_int_text(entry, f"{_GS}colCount"),
    )


def decode_cell_entry(entry: etree._Element) -> CellEntry:
    cell = entry.find(f"{_GS}cell")
    if cell is None:
        raise ProtocolError("Cell entry has no gs:cell element")
    try:
        return CellEntry(
            row=cell.get("row"),
            col=cell.get("col"),
            displayed=cell.text or "",
            input_value=cell.get("inputValue") or "",
            entry_id=_text(entry, f"{_ATOM}id") or None,
            edit_url=_links(entry).get("edit"),
        )
    except ValidationError as e:
        raise ProtocolError(f"Invalid gs:cell element: {e}") from e


def decode_cell_entries(doc: etree._Element) -> list[CellEntry]:
    return [decode_cell_entry(entry) for entry in _entries(doc)]


def decode_cells_feed(doc: etree._Element) -> CellsFeed:
    """Decode a cells feed: grid size, title and every cell entry."""
    row_count = _int_text(doc, f"{_GS}rowCount")
    col_count = _int_text(doc, f"{_GS}colCount")
    if row_count is None or col_count is None:
        raise ProtocolError("Cells feed has no gs:rowCount/gs:colCount")

    entries = decode_cell_entries(doc)
    try:
        return CellsFeed(
            title=_text(doc, f"{_ATOM}title"),
            row_count=row_count,
            col_count=col_count,
            entries=entries,
        )
    except ValidationError as e:
        raise ProtocolError(f"Invalid cells feed: {e}") from e


def decode_batch_results(doc: etree._Element) -> list[BatchResult]:
    """Decode the per-item results of a batch response.

    Raises:
        ProtocolError: If an entry carries neither a status nor an
            interruption.
    """
    results: list[BatchResult] = []
    for entry in _entries(doc):
        batch_id = _text(entry, f"{_BATCH}id") or None
        interrupted = entry.find(f"{_BATCH}interrupted")
        if interrupted is not None:
            results.append(
                BatchResult(
                    batch_id=batch_id,
                    reason=interrupted.get("reason", ""),
                    interrupted=True,
                )
            )
            continue

        status = entry.find(f"{_BATCH}status")
        if status is None:
            raise ProtocolError(f"Batch result {batch_id!r} has no batch:status")
        try:
            code = int(status.get("code", ""))
        except ValueError as e:
            raise ProtocolError(
                f"Batch result {batch_id!r} has an invalid status code"
            ) from e
        results.append(
            BatchResult(
                batch_id=batch_id,
                status_code=code,
                reason=status.get("reason", ""),
            )
        )
    return results


def decode_table_entries(doc: etree._Element) -> list[TableEntry]:
    tables: list[TableEntry] = []
    for entry in _entries(doc):
        worksheet = entry.find(f"{_GS}worksheet")
        content = entry.find(f"{_ATOM}content")
        if worksheet is None or content is None or not content.get("src"):
            raise ProtocolError("Table entry lacks gs:worksheet or content src")
        tables.append(
            TableEntry(
                worksheet_title=worksheet.get("name", ""),
                records_url=content.get("src"),
            )
        )
    return tables


def decode_records(doc: etree._Element) -> list[dict[str, str]]:
    return [
        {
            field.get("name", ""): field.text or ""
            for field in entry.findall(f"{_GS}field")
        }
        for entry in _entries(doc)
    ]


# Building


def _sub(
    parent: etree._Element, tag: str, text: str | None = None, **attrib: str
) -> etree._Element:
    element = etree.SubElement(parent, tag, attrib)
    if text is not None:
        element.text = text
    return element


def build_worksheet_entry(title: str, max_rows: int, max_cols: int) -> bytes:
    entry = etree.Element(f"{_ATOM}entry", nsmap={None: ATOM_NS, "gs": GS_NS})
    _sub(entry, f"{_ATOM}title", title)
    _sub(entry, f"{_GS}rowCount", str(max_rows))
    _sub(entry, f"{_GS}colCount", str(max_cols))
    return to_bytes(entry)


def build_spreadsheet_entry(title: str) -> bytes:
    entry = etree.Element(f"{_ATOM}entry", nsmap={"atom": ATOM_NS, "docs": NSMAP["docs"]})
    _sub(
        entry,
        f"{_ATOM}category",
        scheme=KIND_SCHEME,
        term=KIND_SPREADSHEET,
        label="spreadsheet",
    )
    _sub(entry, f"{_ATOM}title", title)
    return to_bytes(entry)


def build_document_reference(document_id: str, title: str | None = None) -> bytes:
    """Entry pointing at an existing document, used to copy or file it."""
    entry = etree.Element(f"{_ATOM}entry", nsmap={None: ATOM_NS})
    _sub(entry, f"{_ATOM}id", document_id)
    if title is not None:
        _sub(entry, f"{_ATOM}title", title)
    return to_bytes(entry)


def build_cells_batch(feed_id: str, updates: list[CellUpdate]) -> bytes:
    """Build one batch feed with an ``update`` operation per cell.

    Each item's ``batch:id`` is ``"row,col"`` so results can be matched back
    to the cell they belong to.
    """
    feed = etree.Element(
        f"{_ATOM}feed", nsmap={None: ATOM_NS, "batch": BATCH_NS, "gs": GS_NS}
    )
    _sub(feed, f"{_ATOM}id", feed_id)
    for update in updates:
        entry = _sub(feed, f"{_ATOM}entry")
        _sub(entry, f"{_BATCH}id", update.batch_id)
        _sub(entry, f"{_BATCH}operation", type="update")
        _sub(entry, f"{_ATOM}id", update.entry_id)
        _sub(
            entry,
            f"{_ATOM}link",
            rel="edit",
            type="application/atom+xml",
            href=update.edit_url,
        )
        _sub(
            entry,
            f"{_GS}cell",
            row=str(update.row),
            col=str(update.col),
            inputValue=update.input_value,
        )
    logger.debug(f"Built batch feed with {len(updates)} cell update(s)")
    return to_bytes(feed)


def build_table_entry(
    title: str, summary: str, worksheet_title: str, columns: dict[str, str]
) -> bytes:
    entry = etree.Element(f"{_ATOM}entry", nsmap={None: ATOM_NS, "gs": GS_NS})
    _sub(entry, f"{_ATOM}title", title, type="text")
    _sub(entry, f"{_ATOM}summary", summary, type="text")
    _sub(entry, f"{_GS}worksheet", name=worksheet_title)
    _sub(entry, f"{_GS}header", row="1")
    data = _sub(entry, f"{_GS}data", numRows="0", startRow="2")
    for index, name in columns.items():
        _sub(data, f"{_GS}column", index=str(index), name=str(name))
    return to_bytes(entry)


def build_record_entry(values: dict[str, str]) -> bytes:
    entry = etree.Element(f"{_ATOM}entry", nsmap={None: ATOM_NS, "gs": GS_NS})
    for name, value in values.items():
        _sub(entry, f"{_GS}field", str(value), name=str(name))
    return to_bytes(entry)
