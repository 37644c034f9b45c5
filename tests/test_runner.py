"""Tests for netauth_core.runner — CLI entry point."""
import json
from unittest.mock import MagicMock

import pytest

from netauth_core import runner
from netauth_core.config import NetAuthConfig
from tests.conftest import FakeStore


def cli_args(tmp_path, *extra):
    return ["--config", str(tmp_path / "config.json"), "--log-file", str(tmp_path / "service.log"), *extra]


class TestMain:
    def test_refuses_to_start_without_username(self, tmp_path):
        assert runner.main(cli_args(tmp_path)) == 1

    def test_builds_and_runs_loop(self, tmp_path, monkeypatch):
        (tmp_path / "config.json").write_text(json.dumps({
            "username": "65010001",
            "ipAddress": "10.0.0.5",
            "intervalSeconds": 60,
        }))
        created = {}

        class FakeLoop:
            def __init__(self, handle, portal, notifier=None, store=None, mac_address=None):
                created["handle"] = handle
                created["notifier"] = notifier
                created["mac"] = mac_address
                self.run = MagicMock()
                created["loop"] = self

            def stop(self):
                pass

        monkeypatch.setattr(runner, "ControlLoop", FakeLoop)
        monkeypatch.setattr(runner, "PortalClient", MagicMock())
        monkeypatch.setattr(runner, "install_signal_handlers", lambda loop: None)
        monkeypatch.setattr(runner.network, "get_mac_address", lambda: "aabbccddeeff")

        assert runner.main(cli_args(tmp_path, "--no-notify")) == 0
        created["loop"].run.assert_called_once()
        assert created["handle"].snapshot().interval == 60
        assert created["mac"] == "aabbccddeeff"
        assert isinstance(created["notifier"], runner.LogNotifier)

    def test_version_flag(self, capsys):
        with pytest.raises(SystemExit) as exc:
            runner.main(["--version"])
        assert exc.value.code == 0
        assert "kmitlnetauth" in capsys.readouterr().out


class TestForgetPassword:
    def test_removes_entry(self):
        store = FakeStore({"65010001": "secret"})
        assert runner.forget_password(NetAuthConfig(username="65010001"), store) == 0
        assert store.secrets == {}

    def test_needs_username(self):
        assert runner.forget_password(NetAuthConfig(), FakeStore()) == 1

    def test_unavailable_store(self):
        store = FakeStore(available=False)
        assert runner.forget_password(NetAuthConfig(username="65010001"), store) == 1


class TestAutoRestart:
    def test_exit_code_is_passed_through(self, monkeypatch):
        monkeypatch.setattr(runner, "main", lambda argv: 1)
        with pytest.raises(SystemExit) as exc:
            runner.run_with_auto_restart([])
        assert exc.value.code == 1

    def test_ctrl_c_during_startup_stops_quietly(self, monkeypatch):
        def interrupted(argv):
            raise KeyboardInterrupt

        monkeypatch.setattr(runner, "main", interrupted)
        assert runner.run_with_auto_restart([]) is None

    def test_crash_waits_then_restarts(self, monkeypatch):
        calls = []

        def crash_once(argv):
            calls.append(argv)
            if len(calls) == 1:
                raise RuntimeError("boom")
            return 0

        waits = []
        monkeypatch.setattr(runner, "main", crash_once)
        monkeypatch.setattr(runner.time, "sleep", waits.append)
        with pytest.raises(SystemExit) as exc:
            runner.run_with_auto_restart([])
        assert exc.value.code == 0
        assert len(calls) == 2
        assert waits == [10]

    def test_ctrl_c_while_waiting_to_restart(self, monkeypatch):
        def crash(argv):
            raise RuntimeError("boom")

        def interrupted_sleep(seconds):
            raise KeyboardInterrupt

        monkeypatch.setattr(runner, "main", crash)
        monkeypatch.setattr(runner.time, "sleep", interrupted_sleep)
        assert runner.run_with_auto_restart([]) is None
