from typing import Any, Literal, Protocol

from lxml import etree

AuthScope = Literal["wise", "writely", "none"]
ResponseType = Literal["xml", "text", "raw"]


class RemoteAccess(Protocol):
    """What the worksheet and its sync engine need from a session.

    ``request`` returns the parsed document for ``response_type="xml"``, the
    decoded body for ``"text"`` and the raw bytes for ``"raw"``. It raises
    ``TransportError`` on network failures and non-2xx answers, and
    ``ProtocolError`` when the body cannot be understood.
    """

    def request(
        self,
        method: str,
        url: str,
        data: bytes | str | None = None,
        auth: AuthScope = "wise",
        header: dict[str, str] | None = None,
        response_type: ResponseType = "xml",
    ) -> etree._Element | str | bytes | Any: ...
