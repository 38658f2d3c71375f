"""
Exception classes for sheetfeed.

Every error raised by the package derives from ``SheetFeedError`` so callers
can catch the whole family at once.
"""


class SheetFeedError(Exception):
    """Raised when the spreadsheet server or a feed URL cannot be handled."""
    pass


class TransportError(SheetFeedError):
    """Raised when an HTTP request fails.

    Covers network failures and non-2xx responses. The message carries the
    status code, method, URL and the server's response body.
    """
    pass


class AuthenticationError(TransportError):
    """Raised when login fails or the server answers 401."""
    pass


class ProtocolError(SheetFeedError):
    """Raised when a response is not understood.

    Examples:
        - Body that is not well-formed XML
        - Entry without the edit link needed to update it
        - Feed element with a missing or non-numeric field
    """
    pass


class AuthSubTokenError(ProtocolError):
    """Raised when the server returns its "AuthSub token has wrong scope" page."""
    pass


class BatchInterrupted(SheetFeedError):
    """Raised when the server aborted a batch request.

    Chunks sent earlier in the same save have already been applied.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Update has failed: {reason}")


class CellUpdateFailed(SheetFeedError):
    """Raised when the server rejected an individual cell update in a batch.

    Attributes:
        coord: ``(row, col)`` of the first rejected cell in the chunk.
        reason: Server-supplied reason for that cell.
        failures: Every ``(coord, reason)`` rejected in the same chunk.
    """

    def __init__(
        self,
        coord: tuple[int, int],
        reason: str,
        failures: list[tuple[tuple[int, int], str]] | None = None,
    ) -> None:
        self.coord = coord
        self.reason = reason
        self.failures = failures if failures is not None else [(coord, reason)]
        row, col = coord
        message = f"Updating cell ({row}, {col}) has failed: {reason}"
        if len(self.failures) > 1:
            message += f" ({len(self.failures) - 1} more failed in the same batch)"
        super().__init__(message)
