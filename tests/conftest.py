"""
Pytest configuration og shared fixtures.
"""

import pytest

from share_agent.dependencies import reset_singletons
from share_agent.smb import AsyncShare, connect

from tests.fakes import SHARE_UNC, FakeShareClient


@pytest.fixture(autouse=True)
def clean_singletons():
    """Automatically reset singletons before hver test."""
    reset_singletons()
    yield
    reset_singletons()


@pytest.fixture
def fake_client():
    return FakeShareClient()


@pytest.fixture
def connection(fake_client):
    """A ShareConnection to the in-memory share."""
    return connect(SHARE_UNC, "agent", "secret", client=fake_client)


@pytest.fixture
def share(connection):
    return AsyncShare(connection)
