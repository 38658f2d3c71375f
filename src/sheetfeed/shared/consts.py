from typing import Final

# Namespaces
ATOM_NS: Final[str] = "http://www.w3.org/2005/Atom"
GS_NS: Final[str] = "http://schemas.google.com/spreadsheets/2006"
BATCH_NS: Final[str] = "http://schemas.google.com/gdata/batch"
DOCS_NS: Final[str] = "http://schemas.google.com/docs/2007"

NSMAP: Final[dict[str, str]] = {
    "atom": ATOM_NS,
    "gs": GS_NS,
    "batch": BATCH_NS,
    "docs": DOCS_NS,
}

# Link relations
REL_EDIT: Final[str] = "edit"
REL_ALTERNATE: Final[str] = "alternate"
REL_WORKSHEETS_FEED: Final[str] = f"{GS_NS}#worksheetsfeed"
REL_CELLS_FEED: Final[str] = f"{GS_NS}#cellsfeed"
REL_LIST_FEED: Final[str] = f"{GS_NS}#listfeed"

KIND_SCHEME: Final[str] = "http://schemas.google.com/g/2005#kind"
KIND_SPREADSHEET: Final[str] = f"{DOCS_NS}#spreadsheet"

# Endpoints
CLIENT_LOGIN_URL: Final[str] = "https://www.google.com/accounts/ClientLogin"
SPREADSHEETS_FEED_URL: Final[str] = (
    "https://spreadsheets.google.com/feeds/spreadsheets/private/full"
)
WORKSHEETS_FEED_URL_TEMPLATE: Final[str] = (
    "https://spreadsheets.google.com/feeds/worksheets/{key}/private/full"
)
DOCUMENTS_FEED_URL: Final[str] = "https://docs.google.com/feeds/documents/private/full"
DOCUMENT_LIST_URL: Final[str] = "https://docs.google.com/feeds/default/private/full/"
EXPORT_URL: Final[str] = (
    "https://spreadsheets.google.com/feeds/download/spreadsheets/Export"
)
FOLDER_FEED_URL_PREFIX: Final[str] = (
    "http://docs.google.com/feeds/default/private/full/folder%3A"
)

ATOM_CONTENT_TYPE: Final[str] = "application/atom+xml"
GDATA_V3_HEADER: Final[dict[str, str]] = {
    "GData-Version": "3.0",
    "Content-Type": ATOM_CONTENT_TYPE,
}

AUTH_SERVICES: Final[tuple[str, ...]] = ("wise", "writely")
AUTHSUB_WRONG_SCOPE_MARKER: Final[str] = "Token invalid - AuthSub token has wrong scope"

SUPPORTED_EXPORT_FORMATS: Final[frozenset[str]] = frozenset(
    {"xls", "csv", "pdf", "ods", "tsv", "html"}
)

# Larger batches are liable to be rejected by the server.
DEFAULT_BATCH_CHUNK_SIZE: Final[int] = 250
