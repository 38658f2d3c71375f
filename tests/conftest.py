"""Shared pytest fixtures for sheetfeed tests."""

import pytest

from sheetfeed.worksheet import Worksheet
from tests.helpers.fake_remote import CELLS_URL, FakeRemote


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def worksheet(remote: FakeRemote) -> Worksheet:
    return Worksheet(remote, CELLS_URL)
