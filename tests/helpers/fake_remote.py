"""
In-memory stand-in for the spreadsheet server.

Implements the ``request`` signature of ``Session`` for a single worksheet
and answers the handful of feeds the worksheet and its sync engine use:
the cells feed (plain and ``return-empty``), the worksheet entry, the
metadata PUT, the batch endpoint and DELETE. Formulas are only understood as
sums of A1 references, which is enough to check that displayed and input
values come back different after a save.
"""

import re
from urllib.parse import parse_qs, urlparse
from xml.sax.saxutils import escape, quoteattr

from gspread.utils import a1_to_rowcol
from lxml import etree

from sheetfeed.feed import codec
from sheetfeed.shared.consts import ATOM_NS, BATCH_NS, GS_NS

KEY = "key1"
WORKSHEET_KEY = "od6"
CELLS_URL = f"https://spreadsheets.google.com/feeds/cells/{KEY}/{WORKSHEET_KEY}/private/full"
WORKSHEET_URL = (
    f"https://spreadsheets.google.com/feeds/worksheets/{KEY}/private/full/{WORKSHEET_KEY}"
)
EDIT_URL = f"{WORKSHEET_URL}/version1"
LIST_URL = f"https://spreadsheets.google.com/feeds/list/{KEY}/{WORKSHEET_KEY}/private/full"

_NS = f'xmlns="{ATOM_NS}" xmlns:gs="{GS_NS}" xmlns:batch="{BATCH_NS}"'


def cell_id(row: int, col: int) -> str:
    return f"{CELLS_URL}/R{row}C{col}"


def cell_edit_url(row: int, col: int) -> str:
    return f"{cell_id(row, col)}/v1"


def _relative(delta: int) -> str:
    return "" if delta == 0 else f"[{delta}]"


class FakeRemote:
    """Scripted server for one worksheet.

    Attributes:
        cells: Input values stored on the server, keyed by ``(row, col)``.
        requests: Every ``(method, url, data)`` received, in order.
        failing: Cells whose batch update the server rejects, with the reason.
        interrupt_at: Cell at which the server aborts a batch, if any.
        omit_handles: Cells for which ``return-empty`` lists no entry.
    """

    def __init__(self, title: str = "Sheet1", row_count: int = 100, col_count: int = 20):
        self.title = title
        self.row_count = row_count
        self.col_count = col_count
        self.cells: dict[tuple[int, int], str] = {}
        self.requests: list[tuple[str, str, bytes | str | None]] = []
        self.failing: dict[tuple[int, int], str] = {}
        self.interrupt_at: tuple[int, int] | None = None
        self.omit_handles: set[tuple[int, int]] = set()
        self.worksheet_has_edit_link = True
        self.deleted = False

    # Inspection helpers

    def calls(self, method: str, prefix: str = "") -> list[tuple[str, str, bytes | str | None]]:
        return [c for c in self.requests if c[0] == method and c[1].startswith(prefix)]

    def batch_calls(self) -> list[tuple[str, str, bytes | str | None]]:
        return self.calls("POST", f"{CELLS_URL}/batch")

    @staticmethod
    def batch_ids(body: bytes) -> list[str]:
        root = etree.fromstring(body)
        return [e.text for e in root.iter(f"{{{BATCH_NS}}}id")]

    # Server semantics

    def normalize(self, row: int, col: int, value: str) -> str:
        if not value.startswith("="):
            return value

        def to_r1c1(match: re.Match) -> str:
            ref_row, ref_col = a1_to_rowcol(match.group(0))
            return f"R{_relative(ref_row - row)}C{_relative(ref_col - col)}"

        return "=" + re.sub(r"[A-Z]+[0-9]+", to_r1c1, value[1:])

    def displayed(self, row: int, col: int) -> str:
        value = self.cells.get((row, col), "")
        if not value.startswith("="):
            return value
        total = 0
        for term in value[1:].split("+"):
            match = re.fullmatch(r"R(?:\[(-?\d+)\])?C(?:\[(-?\d+)\])?", term)
            ref = (row + int(match.group(1) or 0), col + int(match.group(2) or 0))
            total += int(self.displayed(*ref) or 0)
        return str(total)

    # Documents

    def _cell_entry(self, row: int, col: int) -> str:
        return (
            f"<entry><id>{cell_id(row, col)}</id>"
            f'<link rel="edit" type="application/atom+xml" href="{cell_edit_url(row, col)}"/>'
            f'<gs:cell row="{row}" col="{col}" '
            f"inputValue={quoteattr(self.cells.get((row, col), ''))}>"
            f"{escape(self.displayed(row, col))}</gs:cell></entry>"
        )

    def _cells_feed(self, coords: list[tuple[int, int]]) -> str:
        entries = "".join(self._cell_entry(row, col) for row, col in coords)
        return (
            f"<feed {_NS}><id>{CELLS_URL}</id><title>{escape(self.title)}</title>"
            f"<gs:rowCount>{self.row_count}</gs:rowCount>"
            f"<gs:colCount>{self.col_count}</gs:colCount>{entries}</feed>"
        )

    def _worksheet_entry(self) -> str:
        edit = f'<link rel="edit" href="{EDIT_URL}"/>' if self.worksheet_has_edit_link else ""
        return (
            f"<entry {_NS}><id>{WORKSHEET_URL}</id><title>{escape(self.title)}</title>"
            f'<link rel="{GS_NS}#cellsfeed" href="{CELLS_URL}"/>'
            f'<link rel="{GS_NS}#listfeed" href="{LIST_URL}"/>{edit}'
            f"<gs:rowCount>{self.row_count}</gs:rowCount>"
            f"<gs:colCount>{self.col_count}</gs:colCount></entry>"
        )

    def _batch(self, body: bytes) -> str:
        root = etree.fromstring(body)
        results = []
        for entry in root.findall(f"{{{ATOM_NS}}}entry"):
            batch_id = entry.findtext(f"{{{BATCH_NS}}}id")
            cell = entry.find(f"{{{GS_NS}}}cell")
            row, col = int(cell.get("row")), int(cell.get("col"))
            assert entry.findtext(f"{{{ATOM_NS}}}id") == cell_id(row, col)
            assert entry.find(f"{{{ATOM_NS}}}link").get("href") == cell_edit_url(row, col)

            if (row, col) == self.interrupt_at:
                results.append(
                    '<entry><batch:interrupted reason="quota exceeded" '
                    'success="0" failures="1" parsed="1"/></entry>'
                )
                break
            if (row, col) in self.failing:
                reason = quoteattr(self.failing[(row, col)])
                results.append(
                    f"<entry><batch:id>{batch_id}</batch:id>"
                    f'<batch:status code="403" reason={reason}/></entry>'
                )
                continue
            self.cells[(row, col)] = self.normalize(row, col, cell.get("inputValue"))
            results.append(
                f"<entry><batch:id>{batch_id}</batch:id>"
                f'<batch:status code="200" reason="Success"/></entry>'
            )
        return f"<feed {_NS}>{''.join(results)}</feed>"

    def _update_worksheet(self, body: bytes) -> str:
        root = etree.fromstring(body)
        self.title = root.findtext(f"{{{ATOM_NS}}}title")
        self.row_count = int(root.findtext(f"{{{GS_NS}}}rowCount"))
        self.col_count = int(root.findtext(f"{{{GS_NS}}}colCount"))
        return self._worksheet_entry()

    # Remote access

    def request(
        self, method, url, data=None, auth="wise", header=None, response_type="xml"
    ):
        self.requests.append((method, url, data))
        parsed = urlparse(url)
        base = f"{parsed.scheme}://{parsed.netloc}{parsed.path}"

        if method == "GET" and base == CELLS_URL:
            query = parse_qs(parsed.query)
            if query.get("return-empty") == ["true"]:
                coords = [
                    (row, col)
                    for row in range(int(query["min-row"][0]), int(query["max-row"][0]) + 1)
                    for col in range(int(query["min-col"][0]), int(query["max-col"][0]) + 1)
                    if row <= self.row_count and col <= self.col_count
                    and (row, col) not in self.omit_handles
                ]
            else:
                coords = sorted(c for c, v in self.cells.items() if v != "")
            xml = self._cells_feed(coords)
        elif method == "GET" and url == WORKSHEET_URL:
            xml = self._worksheet_entry()
        elif method == "PUT" and url == EDIT_URL:
            xml = self._update_worksheet(data)
        elif method == "POST" and url == f"{CELLS_URL}/batch":
            xml = self._batch(data)
        elif method == "DELETE" and url == EDIT_URL:
            self.deleted = True
            xml = f"<feed {_NS}/>"
        else:
            raise AssertionError(f"Unexpected request: {method} {url}")
        return codec.parse_document(xml.encode("utf-8"))
