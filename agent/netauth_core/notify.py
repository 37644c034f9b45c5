"""
Notification sinks — where connection and login events go.

The control loop calls these fire-and-forget and guards every call. The
desktop sink renders its popup on its own thread, so the loop never waits.
"""

import threading

from plyer import notification

from .config import log
from .constants import APP_NAME


class NotificationSink:
    """Receives state-change events from the control loop. Defaults do nothing."""

    def on_connection_restored(self):
        pass

    def on_connection_lost(self):
        pass

    def on_login_succeeded(self, username):
        pass

    def on_login_failed(self, reason):
        pass


class LogNotifier(NotificationSink):
    """Renders each event as a log line. Enough for headless and container hosts."""

    def show(self, title, message):
        log.info("Notification: %s | %s", title, message)

    def on_connection_restored(self):
        self.show("Connected", "Internet connection is active.")

    def on_connection_lost(self):
        self.show("Disconnected", "Internet connection lost. Attempting to reconnect...")

    def on_login_succeeded(self, username):
        self.show("Login Successful", f"Logged in as {username}")

    def on_login_failed(self, reason):
        self.show("Login Failed", str(reason))


class DesktopNotifier(LogNotifier):
    """Log line plus an OS notification popup via plyer."""

    def __init__(self, app_name=APP_NAME, timeout=5):
        self.app_name = app_name
        self.timeout = timeout

    def show(self, title, message):
        """Log now, pop up on a daemon thread. Returns that thread."""
        super().show(title, message)
        # Some backends shell out or wait on dbus; keep them off the loop thread.
        thread = threading.Thread(
            target=self._popup, args=(title, message),
            name="netauth-notify", daemon=True,
        )
        thread.start()
        return thread

    def _popup(self, title, message):
        # No notification daemon on headless Linux; warn and carry on.
        try:
            notification.notify(
                title=title,
                message=message,
                app_name=self.app_name,
                timeout=self.timeout,
            )
        except Exception as e:
            log.warning("Failed to show notification: %s", e)
