"""sheetfeed: a client for feed-based spreadsheets.

This package reads and writes spreadsheets exposed through the Atom/GData
feed API. Cells are cached locally per worksheet; changes are sent in
batches when ``save()`` is called.

Features:
    - ClientLogin and OAuth (any authorized ``requests.Session``) sessions
    - Token persistence with ``saved_session``
    - Spreadsheet discovery, creation, duplication, export and deletion
    - Sparse local cell cache with displayed and input (formula) values
    - Chunked batch saves with per-cell error reporting

Main Classes:
    Session: Authenticated access to the feeds.
    Spreadsheet: A document holding worksheets.
    Worksheet: Cell access with deferred, batched persistence.

Quick Start:
    >>> import sheetfeed
    >>> session = sheetfeed.login("user@example.com", "secret")
    >>> ws = session.spreadsheet_by_key("pz7XtlQC-PYx-jrVMJErTcg").worksheets()[0]
    >>> ws[2, 1] = "foo"
    >>> ws[1, 3] = "=A1+B1"
    >>> ws.save()
    True
"""

import requests

from .collection import Collection
from .session import Session, saved_session
from .shared.config import SheetFeedConfig
from .shared.exceptions import (
    AuthenticationError,
    AuthSubTokenError,
    BatchInterrupted,
    CellUpdateFailed,
    ProtocolError,
    SheetFeedError,
    TransportError,
)
from .spreadsheet import Spreadsheet
from .table import Record, Table
from .worksheet import Worksheet

__version__ = "0.1.0"


def login(mail: str, password: str, config: SheetFeedConfig | None = None) -> Session:
    """Authenticate with mail and password and return a Session.

    Raises:
        AuthenticationError: If authentication fails.
    """
    return Session.login_with_password(mail, password, config)


def login_with_oauth(
    oauth_session: requests.Session, config: SheetFeedConfig | None = None
) -> Session:
    """Return a Session sending every request through ``oauth_session``.

    ``oauth_session`` is any ``requests.Session`` that signs its requests,
    e.g. an ``OAuth1Session`` or ``OAuth2Session`` from requests-oauthlib.
    """
    return Session.login_with_oauth(oauth_session, config)


__all__ = [
    "login",
    "login_with_oauth",
    "saved_session",
    "Session",
    "Spreadsheet",
    "Worksheet",
    "Collection",
    "Table",
    "Record",
    "SheetFeedConfig",
    "SheetFeedError",
    "TransportError",
    "AuthenticationError",
    "ProtocolError",
    "AuthSubTokenError",
    "BatchInterrupted",
    "CellUpdateFailed",
]
