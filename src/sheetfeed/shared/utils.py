"""Shared utility functions"""
import re
from urllib.parse import urlencode

from gspread.utils import a1_to_rowcol

from .exceptions import SheetFeedError

CELLS_FEED_URL_PATTERN = re.compile(
    r"^https?://spreadsheets\.google\.com/feeds/cells/(.*)/(.*)/private/full$"
)
WORKSHEETS_FEED_URL_PATTERN = re.compile(
    r"^https?://spreadsheets\.google\.com/feeds/worksheets/(.*)/private/.*$"
)


def split_list(lst: list, chunk_size: int) -> list[list]:
    """
    Split a list into smaller chunks of specified size

    Args:
        lst (list): Input list to split
        chunk_size (int): Size of each chunk

    Returns:
        list: List containing sublists of specified chunk size
    """
    return [lst[i : i + chunk_size] for i in range(0, len(lst), chunk_size)]


def encode_query(params: dict[str, str] | None) -> str:
    return urlencode(params or {})


def concat_url(url: str, piece: str) -> str:
    """Append ``piece`` to the path of ``url``, keeping its query string."""
    base, sep, query = url.partition("?")
    return f"{base}{piece}{sep}{query}"


def parse_cells_feed_url(url: str) -> tuple[str, str]:
    """Return ``(spreadsheet_key, worksheet_key)`` parsed from a cells feed URL.

    Raises:
        SheetFeedError: If the URL is not a cells feed URL.
    """
    match = CELLS_FEED_URL_PATTERN.match(url)
    if not match:
        raise SheetFeedError(f"cells feed URL is in unknown format: {url}")
    return match.group(1), match.group(2)


def parse_worksheets_feed_url(url: str) -> str:
    """Return the spreadsheet key parsed from a worksheets feed URL.

    Raises:
        SheetFeedError: If the URL is not a worksheets feed URL.
    """
    match = WORKSHEETS_FEED_URL_PATTERN.match(url)
    if not match:
        raise SheetFeedError(f"worksheets feed URL is in unknown format: {url}")
    return match.group(1)


def label_to_coord(label: str) -> tuple[int, int]:
    """Convert an A1 label such as ``"B3"`` to a 1-based ``(row, col)``."""
    return a1_to_rowcol(label)
