"""
ControlLoop — keeps this machine logged in to the captive portal.

One thread, one cycle at a time:

  paused?            → no network, check again in PAUSED_POLL_SEC
  probe passes       → reset failure count, heartbeat, login once if it fails
  probe fails        → login (counted) until max_attempt, then COOLDOWN_SEC

Heartbeat failures while the probe passes are not counted and never flip
the state to Disconnected; only the probe does that.

Front-ends talk to a running loop through pause(), resume(),
update_credentials() and snapshot(), all safe from any thread. Every sleep
is an Event wait, so stop() and the commands take effect without waiting
out the interval. A request already on the wire is allowed to finish or
time out.
"""

import threading

from .config import log
from .constants import COOLDOWN_SEC, PAUSED_POLL_SEC, ERROR_RETRY_SEC
from .credentials import Credentials, resolve_password
from .errors import AuthError, ConfigError, MissingCredentials
from .notify import LogNotifier
from .state import Session, StateSnapshot
from . import network


class ControlLoop:

    def __init__(self, config_handle, portal, notifier=None, store=None, mac_address=None):
        self._config = config_handle
        self._portal = portal
        self._notifier = notifier if notifier is not None else LogNotifier()
        self._store = store
        self._mac_address = mac_address if mac_address is not None else network.get_mac_address()

        initial = config_handle.snapshot()
        self.session = Session(paused=not initial.auto_login)
        self._seen_auto_login = initial.auto_login
        self._missing_reported = False

        self._lock = threading.Lock()       # guards session + pause bookkeeping
        self._wake = threading.Event()
        self._stop = threading.Event()
        self._thread = None

    # ─── Lifecycle ───────────────────────────────────────────

    def run(self):
        """Run cycles until stop(). Blocks the calling thread."""
        config = self._config.snapshot()
        log.info(
            "Control loop started (user=%s, interval=%ds, max_attempt=%d, auto_login=%s)",
            config.username or "-", config.interval, config.max_attempt, config.auto_login,
        )
        while not self._stop.is_set():
            try:
                delay = self.run_cycle()
            except Exception as e:
                log.error("Unexpected error in control loop: %s", e, exc_info=True)
                self._portal.reset()
                delay = ERROR_RETRY_SEC
            if self._stop.is_set():
                break
            self._sleep(delay)
        log.info("Control loop stopped.")

    def start(self):
        """Run the loop on a daemon thread and return the thread."""
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="netauth-loop", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self):
        """Cooperative shutdown at the next suspension point."""
        self._stop.set()
        self._wake.set()

    def join(self, timeout=None):
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def stopped(self):
        return self._stop.is_set()

    def _sleep(self, seconds):
        """Interruptible sleep. Returns True if something woke us early."""
        woken = self._wake.wait(min(seconds, threading.TIMEOUT_MAX))
        self._wake.clear()
        return woken

    # ─── Commands (any thread) ───────────────────────────────

    def pause(self):
        with self._lock:
            self._config.update(auto_login=False)
            self._seen_auto_login = False
            if not self.session.paused:
                log.info("Auto login paused")
            self.session.paused = True
        self._wake.set()

    def resume(self):
        with self._lock:
            self._config.update(auto_login=True)
            self._seen_auto_login = True
            if self.session.paused:
                log.info("Auto login resumed")
            self.session.paused = False
        self._wake.set()

    def update_credentials(self, username, password, persist=True):
        """Swap credentials in the live config and, if it has a path, save them."""
        self._config.update(username=username, password=password or None)
        if persist and self._config.path is not None:
            try:
                self._config.save()
            except ConfigError as e:
                log.error("Could not persist new credentials: %s", e)
        with self._lock:
            self._missing_reported = False
        log.info("Credentials updated for %s", username)
        self._wake.set()

    def snapshot(self) -> StateSnapshot:
        username = self._config.snapshot().username
        with self._lock:
            return StateSnapshot(
                connectivity_state=self.session.connectivity_state,
                last_heartbeat_time=self.session.last_heartbeat_time,
                username=username,
                paused=self.session.paused,
                consecutive_login_failures=self.session.consecutive_login_failures,
            )

    # ─── One cycle ───────────────────────────────────────────

    def run_cycle(self):
        """Run one probe/heartbeat/login cycle. Returns seconds until the next."""
        config = self._config.snapshot()

        if self._check_paused():
            return PAUSED_POLL_SEC

        if self._portal.probe_connectivity():
            self._on_online(config)
        else:
            self._on_offline(config)
        return config.interval

    def _check_paused(self):
        # A front-end may have flipped auto_login on the handle directly.
        with self._lock:
            auto_login = self._config.snapshot().auto_login
            if auto_login != self._seen_auto_login:
                self._seen_auto_login = auto_login
                self.session.paused = not auto_login
                log.info("Auto login %s by config change", "enabled" if auto_login else "disabled")
            return self.session.paused

    def _on_online(self, config):
        with self._lock:
            restored = self.session.mark_connected()
        if restored:
            log.info("Internet connection restored.")
            self._emit("on_connection_restored")

        if self._stop.is_set():
            return
        if not config.username:
            # No heartbeat without a user; the login path reports the gap.
            log.warning("Username empty. Skipping heartbeat.")
            self._attempt_login(config)
            return
        if self._portal.heartbeat(config.username):
            with self._lock:
                self.session.record_heartbeat()
            return

        log.info("Heartbeat failed, attempting login...")
        self._attempt_login(config)

    def _on_offline(self, config):
        with self._lock:
            lost = self.session.mark_disconnected()
            attempts = self.session.consecutive_login_failures
        if lost:
            log.warning("Internet connection lost.")
            self._emit("on_connection_lost")

        if attempts < config.max_attempt:
            log.warning(
                "No internet connection. Attempting login (%d/%d)...",
                attempts + 1, config.max_attempt,
            )
            self._attempt_login(config)
            with self._lock:
                self.session.consecutive_login_failures += 1
            return

        log.error(
            "Max login attempts reached (%d). Waiting %ds before retrying...",
            config.max_attempt, COOLDOWN_SEC,
        )
        self._sleep(COOLDOWN_SEC)
        with self._lock:
            self.session.consecutive_login_failures = 0

    # ─── Login ───────────────────────────────────────────────

    def credentials(self, config) -> Credentials:
        """Fresh credentials for one request."""
        return Credentials(
            username=config.username,
            password=resolve_password(config.username, config.password, self._store),
            ip_address=config.ip_address or "",
            mac_address=self._mac_address,
        )

    def _attempt_login(self, config):
        """One login. Returns True on success; never raises AuthError."""
        if self._stop.is_set():
            return False
        creds = self.credentials(config)
        try:
            self._portal.login(creds.username, creds.password, creds.ip_address, creds.mac_address)
        except MissingCredentials as e:
            log.warning("Username or password empty. Skipping login.")
            with self._lock:
                first = not self._missing_reported
                self._missing_reported = True
            if first:
                self._emit("on_login_failed", str(e))
            return False
        except AuthError as e:
            log.error("Login error: %s", e)
            self._emit("on_login_failed", str(e))
            return False

        with self._lock:
            self.session.record_login()
            self._missing_reported = False
        self._emit("on_login_succeeded", creds.username)
        return True

    def _emit(self, event, *args):
        try:
            getattr(self._notifier, event)(*args)
        except Exception as e:
            log.warning("Notifier %s failed: %s", event, e)
