"""Configuration module for sheetfeed.

This module provides the configuration class shared by the session and the
synchronization engine: transport timeout, batch chunk size, the client
``source`` string sent on login and the location of the saved token file.

Classes:
    SheetFeedConfig: Configuration container with environment loading.

Example:
    >>> from sheetfeed.shared import SheetFeedConfig
    >>> config = SheetFeedConfig.from_env(".env")
    >>> config.batch_chunk_size
    250
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .consts import DEFAULT_BATCH_CHUNK_SIZE


class SheetFeedConfig(BaseModel):
    """Settings for sheetfeed sessions and worksheets.

    Every field can be given by name or, when loaded from the environment, by
    its ``SHEETFEED_*`` alias.

    Attributes:
        request_timeout: Seconds before a single HTTP request is abandoned.
        batch_chunk_size: Maximum number of cell updates sent in one batch
            request.
        source: Client identifier sent to the login endpoint.
        token_path: File used by ``saved_session`` to persist auth tokens.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        alias="SHEETFEED_REQUEST_TIMEOUT",
        description="Timeout in seconds for each HTTP request",
    )
    batch_chunk_size: int = Field(
        default=DEFAULT_BATCH_CHUNK_SIZE,
        gt=0,
        alias="SHEETFEED_BATCH_CHUNK_SIZE",
        description="Number of cell updates per batch request",
    )
    source: str = Field(
        default="sheetfeed-0.1.0",
        alias="SHEETFEED_SOURCE",
        description="Client identifier sent on login",
    )
    token_path: Path = Field(
        default=Path.home() / ".sheetfeed.token",
        alias="SHEETFEED_TOKEN_PATH",
        description="File storing auth tokens between runs",
    )

    @staticmethod
    def from_env(dotenv_path: str = ".env") -> "SheetFeedConfig":
        load_dotenv(dotenv_path)
        return SheetFeedConfig.model_validate(os.environ)
