"""Tables and records of the deprecated table feed."""

import logging
import warnings

from .feed import codec
from .feed.schemas import TableEntry
from .shared.remote import RemoteAccess

logger = logging.getLogger(__name__)

DEPRECATION_MESSAGE = (
    "Spreadsheet Table and Record feeds are deprecated and no longer served "
    "by the server."
)


def warn_deprecated() -> None:
    warnings.warn(DEPRECATION_MESSAGE, DeprecationWarning, stacklevel=3)


class Record(dict):
    """A table row as a mapping of field name to value."""

    def __repr__(self) -> str:
        content = ", ".join(f"{k!r}: {v!r}" for k, v in self.items())
        return f"<{type(self).__name__} {{{content}}}>"


class Table:
    """Use ``Worksheet.add_table`` or ``Worksheet.tables`` to get one."""

    def __init__(self, session: RemoteAccess, entry: TableEntry) -> None:
        self.session = session
        self.worksheet_title = entry.worksheet_title
        self.records_url = entry.records_url

    def add_record(self, values: dict[str, str]) -> None:
        warn_deprecated()
        self.session.request("POST", self.records_url, data=codec.build_record_entry(values))

    def records(self) -> list[Record]:
        warn_deprecated()
        doc = self.session.request("GET", self.records_url)
        return [Record(fields) for fields in codec.decode_records(doc)]
