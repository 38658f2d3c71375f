from .config import SheetFeedConfig
from .exceptions import (
    SheetFeedError,
    TransportError,
    AuthenticationError,
    ProtocolError,
    AuthSubTokenError,
    BatchInterrupted,
    CellUpdateFailed,
)

__all__ = [
    "SheetFeedConfig",
    "SheetFeedError",
    "TransportError",
    "AuthenticationError",
    "ProtocolError",
    "AuthSubTokenError",
    "BatchInterrupted",
    "CellUpdateFailed",
]
