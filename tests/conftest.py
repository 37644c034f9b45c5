"""Shared test fixtures for the netauth test suite.

FakeStore stands in for the OS keyring and make_loop() builds a ControlLoop
around MagicMock portal/notifier objects, so nothing here touches the
network or the real keyring.
"""

from unittest.mock import MagicMock

import pytest

from netauth_core.app import ControlLoop
from netauth_core.config import ConfigHandle, NetAuthConfig, ENV_OVERRIDES
from netauth_core.errors import SecureStoreUnavailable


class FakeStore:
    """In-memory keyring. available=False makes every call fail like a headless host."""

    def __init__(self, secrets=None, available=True):
        self.secrets = dict(secrets or {})
        self.available = available
        self.set_calls = []

    def _check(self):
        if not self.available:
            raise SecureStoreUnavailable("No recommended backend was available")

    def get_password(self, username):
        self._check()
        return self.secrets.get(username)

    def set_password(self, username, password):
        self.set_calls.append((username, password))
        self._check()
        self.secrets[username] = password

    def delete_password(self, username):
        self._check()
        return self.secrets.pop(username, None) is not None


def make_response(status_code=200, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    return resp


def make_config(**overrides):
    defaults = dict(
        username="65010001",
        password="secret",
        ip_address="10.0.0.5",
        interval=300,
        max_attempt=20,
        auto_login=True,
    )
    defaults.update(overrides)
    return NetAuthConfig(**defaults)


def make_loop(config=None, portal=None, notifier=None, store=None, path=None):
    """ControlLoop with mocks and a recording, non-blocking _sleep.

    Every requested sleep is appended to ``loop.sleeps``.
    """
    handle = ConfigHandle(config or make_config(), path=path, store=store)
    if portal is None:
        portal = MagicMock()
        portal.probe_connectivity.return_value = True
        portal.heartbeat.return_value = True
    loop = ControlLoop(
        handle,
        portal,
        notifier=notifier if notifier is not None else MagicMock(),
        store=store,
        mac_address="aabbccddeeff",
    )
    loop.sleeps = []
    loop._sleep = lambda seconds: loop.sleeps.append(seconds)
    return loop


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep KMITL_* variables from the developer's shell out of the tests."""
    for var in ENV_OVERRIDES:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def store():
    return FakeStore()
