"""Tests for netauth_core.notify — notification sinks."""
import threading
from unittest.mock import MagicMock

from netauth_core import notify
from netauth_core.notify import DesktopNotifier, LogNotifier, NotificationSink


class TestSinks:
    def test_base_sink_is_a_no_op(self):
        sink = NotificationSink()
        sink.on_connection_restored()
        sink.on_connection_lost()
        sink.on_login_succeeded("65010001")
        sink.on_login_failed("Status code: 500")

    def test_log_notifier_titles(self, monkeypatch):
        shown = []
        sink = LogNotifier()
        monkeypatch.setattr(sink, "show", lambda title, message: shown.append((title, message)))
        sink.on_connection_restored()
        sink.on_connection_lost()
        sink.on_login_succeeded("65010001")
        sink.on_login_failed("Status code: 500")
        assert [title for title, _ in shown] == [
            "Connected", "Disconnected", "Login Successful", "Login Failed",
        ]
        assert shown[2][1] == "Logged in as 65010001"
        assert shown[3][1] == "Status code: 500"

    def test_desktop_notifier_calls_plyer(self, monkeypatch):
        fake = MagicMock()
        monkeypatch.setattr(notify, "notification", fake)
        DesktopNotifier().show("Login Successful", "Logged in as 65010001").join(timeout=2)
        fake.notify.assert_called_once_with(
            title="Login Successful",
            message="Logged in as 65010001",
            app_name="KMITL NetAuth",
            timeout=5,
        )

    def test_desktop_notifier_survives_headless_host(self, monkeypatch):
        fake = MagicMock()
        fake.notify.side_effect = NotImplementedError("No usable implementation found!")
        monkeypatch.setattr(notify, "notification", fake)
        thread = DesktopNotifier().show("Disconnected", "Internet connection lost.")
        thread.join(timeout=2)
        assert not thread.is_alive()
        fake.notify.assert_called_once()

    def test_slow_backend_does_not_block_caller(self, monkeypatch):
        release = threading.Event()
        fake = MagicMock()
        fake.notify.side_effect = lambda **_kwargs: release.wait(5)
        monkeypatch.setattr(notify, "notification", fake)

        thread = DesktopNotifier().show("Connected", "Internet connection is active.")
        assert thread.is_alive()
        assert thread.daemon
        release.set()
        thread.join(timeout=2)
        assert not thread.is_alive()
