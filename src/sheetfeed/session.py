"""Authenticated access to the spreadsheet feeds.

``Session`` is the only place that talks HTTP. It authenticates with
ClientLogin (one token per service, ``"wise"`` for spreadsheet feeds and
``"writely"`` for document list feeds) or through a caller-supplied
``requests.Session`` that already carries OAuth credentials.

Example:
    >>> import sheetfeed
    >>> session = sheetfeed.login("user@example.com", "secret")
    >>> for ss in session.spreadsheets({"title": "Budget"}):
    ...     print(ss.title(), ss.key)
"""

import getpass
import html
import logging
import os
import re
from collections.abc import Callable
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import requests
from lxml import etree

from .collection import Collection
from .feed import codec
from .shared.config import SheetFeedConfig
from .shared.consts import (
    ATOM_CONTENT_TYPE,
    AUTH_SERVICES,
    AUTHSUB_WRONG_SCOPE_MARKER,
    CLIENT_LOGIN_URL,
    DOCUMENTS_FEED_URL,
    REL_WORKSHEETS_FEED,
    SPREADSHEETS_FEED_URL,
    WORKSHEETS_FEED_URL_TEMPLATE,
)
from .shared.exceptions import (
    AuthenticationError,
    AuthSubTokenError,
    SheetFeedError,
    TransportError,
)
from .shared.remote import AuthScope, ResponseType
from .shared.utils import encode_query
from .spreadsheet import Spreadsheet, require_link
from .worksheet import Worksheet

logger = logging.getLogger(__name__)


class Session:
    """Authenticated session.

    Use ``sheetfeed.login``, ``sheetfeed.login_with_oauth`` or
    ``sheetfeed.saved_session`` to get one.

    Attributes:
        config: Settings for timeouts, batch size and login source.
        on_auth_fail: Called when authentication fails. When it returns True
            the failed request is tried again.
    """

    def __init__(
        self,
        auth_tokens: dict[str, str] | None = None,
        oauth_session: requests.Session | None = None,
        config: SheetFeedConfig | None = None,
    ) -> None:
        self.config = config or SheetFeedConfig()
        self._auth_tokens: dict[str, str] = dict(auth_tokens or {})
        self._oauth_session = oauth_session
        self._http = oauth_session if oauth_session is not None else requests.Session()
        self.on_auth_fail: Callable[[], bool] | None = None

    @classmethod
    def login_with_password(
        cls, mail: str, password: str, config: SheetFeedConfig | None = None
    ) -> "Session":
        session = cls(config=config)
        session.login(mail, password)
        return session

    @classmethod
    def login_with_oauth(
        cls, oauth_session: requests.Session, config: SheetFeedConfig | None = None
    ) -> "Session":
        return cls(oauth_session=oauth_session, config=config)

    def login(self, mail: str, password: str) -> None:
        """Authenticate with ClientLogin and replace the current tokens.

        Raises:
            AuthenticationError: If authentication fails and ``on_auth_fail``
                does not recover.
        """
        try:
            self._auth_tokens = {}
            for service in AUTH_SERVICES:
                self._authenticate(mail, password, service)
        except SheetFeedError as e:
            if self.on_auth_fail is not None and self.on_auth_fail():
                return
            raise AuthenticationError(f"authentication failed for {mail}: {e}") from e
        logger.info(f"Logged in as {mail}")

    @property
    def auth_tokens(self) -> dict[str, str]:
        return dict(self._auth_tokens)

    def auth_token(self, auth: str = "wise") -> str | None:
        return self._auth_tokens.get(auth)

    def auth_header(self, auth: AuthScope) -> dict[str, str]:
        if self._oauth_session is not None or auth == "none":
            return {}
        token = self._auth_tokens.get(auth)
        if not token:
            return {}
        return {"Authorization": f"GoogleLogin auth={token}"}

    def request(
        self,
        method: str,
        url: str,
        data: bytes | str | None = None,
        auth: AuthScope = "wise",
        header: dict[str, str] | None = None,
        response_type: ResponseType = "xml",
    ) -> etree._Element | str | bytes:
        """Send a request and return the converted response.

        Plain ``http://`` URLs are always upgraded to HTTPS. A body defaults to
        the Atom content type unless ``header`` is given.

        Raises:
            AuthenticationError: On a 401 that ``on_auth_fail`` does not fix.
            TransportError: On network failures and other non-2xx responses.
            AuthSubTokenError: If the server says the token has the wrong scope.
            ProtocolError: If an XML response cannot be parsed.
        """
        url = re.sub(r"^http://", "https://", url)
        if header is not None:
            add_header = dict(header)
        else:
            add_header = {"Content-Type": ATOM_CONTENT_TYPE} if data else {}

        while True:
            headers = {**self.auth_header(auth), **add_header}
            logger.debug(f"{method} {url}")
            try:
                response = self._http.request(
                    method,
                    url,
                    data=data,
                    headers=headers,
                    timeout=self.config.request_timeout,
                )
            except requests.RequestException as e:
                raise TransportError(f"{method} {url} failed: {e}") from e

            if response.status_code == 401 and self.on_auth_fail is not None:
                logger.warning(f"Authentication rejected for {method} {url}, retrying")
                if self.on_auth_fail():
                    continue

            if not 200 <= response.status_code < 300:
                error_class = (
                    AuthenticationError if response.status_code == 401 else TransportError
                )
                raise error_class(
                    f"Response code {response.status_code} for {method} {url}: "
                    f"{html.unescape(response.text)}"
                )

            self._check_for_errors(response)
            return self._convert_response(response, response_type)

    @staticmethod
    def _check_for_errors(response: requests.Response) -> None:
        if AUTHSUB_WRONG_SCOPE_MARKER in response.text:
            raise AuthSubTokenError(f"Token invalid, HTML returned was {response.text}")

    @staticmethod
    def _convert_response(
        response: requests.Response, response_type: ResponseType
    ) -> etree._Element | str | bytes:
        if response_type == "xml":
            return codec.parse_document(response.content)
        if response_type == "text":
            return response.text
        if response_type == "raw":
            return response.content
        raise ValueError(f"unknown response_type: {response_type}")

    def _authenticate(self, mail: str, password: str, service: str) -> None:
        params = {
            "accountType": "HOSTED_OR_GOOGLE",
            "Email": mail,
            "Passwd": password,
            "service": service,
            "source": self.config.source,
        }
        body = self.request(
            "POST",
            CLIENT_LOGIN_URL,
            data=encode_query(params),
            auth="none",
            header={"Content-Type": "application/x-www-form-urlencoded"},
            response_type="text",
        )
        match = re.search(r"^Auth=(.*)$", body, re.MULTILINE)
        if not match:
            raise AuthenticationError(f"No Auth token in login response for {service}")
        self._auth_tokens[service] = match.group(1).strip()

    # Feeds

    def spreadsheets(self, params: dict[str, str] | None = None) -> list[Spreadsheet]:
        """Spreadsheets of the user, filtered by feed query parameters.

        Example:
            >>> session.spreadsheets({"title": "Budget"})
        """
        url = f"{SPREADSHEETS_FEED_URL}?{encode_query(params)}"
        doc = self.request("GET", url)
        return [
            Spreadsheet(self, require_link(entry, REL_WORKSHEETS_FEED), entry.title, self.config)
            for entry in codec.decode_entries(doc)
        ]

    def spreadsheet_by_key(self, key: str) -> Spreadsheet:
        url = WORKSHEETS_FEED_URL_TEMPLATE.format(key=key)
        return Spreadsheet(self, url, config=self.config)

    def spreadsheet_by_url(self, url: str) -> Spreadsheet:
        """Spreadsheet from its browser URL (``.../ccc?key=...``) or its
        worksheets feed URL."""
        parsed = urlparse(url)
        if parsed.hostname == "spreadsheets.google.com" and parsed.path.endswith("/ccc"):
            keys = parse_qs(parsed.query).get("key")
            if keys:
                return self.spreadsheet_by_key(keys[0])
        return Spreadsheet(self, url, config=self.config)

    def worksheet_by_url(self, url: str) -> Worksheet:
        """Worksheet from the URL of its cells feed."""
        return Worksheet(
            self, url, resolve_spreadsheet=self.spreadsheet_by_key, config=self.config
        )

    def create_spreadsheet(
        self, title: str = "Untitled", feed_url: str = DOCUMENTS_FEED_URL
    ) -> Spreadsheet:
        body = codec.build_spreadsheet_entry(title)
        doc = self.request("POST", feed_url, data=body, auth="writely")
        url = require_link(codec.decode_first_entry(doc), REL_WORKSHEETS_FEED)
        logger.info(f"Created spreadsheet '{title}'")
        return Spreadsheet(self, url, title, self.config)

    def collection_by_url(self, url: str) -> Collection:
        return Collection(self, url)


def _write_tokens(path: Path, session: Session) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        for service in AUTH_SERVICES:
            f.write(f"{session.auth_token(service) or ''}\n")


def saved_session(
    path: str | Path | None = None, config: SheetFeedConfig | None = None
) -> Session:
    """Restore a session from a token file, prompting for credentials if needed.

    When the file is missing or its tokens are rejected, the mail address and
    password are read from the console and the new tokens are written back to
    the file, readable by the owner only.
    """
    config = config or SheetFeedConfig()
    token_path = Path(path) if path is not None else config.token_path

    tokens: dict[str, str] = {}
    if token_path.exists():
        lines = token_path.read_text(encoding="utf-8").splitlines()
        for service, line in zip(AUTH_SERVICES, lines):
            if line.strip():
                tokens[service] = line.strip()

    session = Session(tokens, config=config)

    def prompt_login() -> bool:
        mail = input("Mail: ")
        password = getpass.getpass("Password: ")
        session.login(mail, password)
        _write_tokens(token_path, session)
        return True

    session.on_auth_fail = prompt_login
    if not session.auth_token():
        prompt_login()
    return session
