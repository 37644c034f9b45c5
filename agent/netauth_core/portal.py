"""
Portal calls — connectivity probe, heartbeat, login.

All calls are blocking and run on the control loop's thread, one at a time,
so the session's cookie jar sees them in order. A successful login's session
cookie is carried into the following heartbeats.

probe_connectivity() and heartbeat() never raise: a failure there is an
expected, frequent condition. login() raises AuthError subclasses.
"""

import requests

from .config import log
from .constants import (
    LOGIN_URL, HEARTBEAT_URL, CHECK_URL, CHECK_SENTINEL, ACIP,
    HEARTBEAT_CLIENT_OS, HEARTBEAT_SPEED, HEARTBEAT_NEWAUTH,
    LOGIN_AGREED, LOGIN_AUTH_TYPE, REQUEST_TIMEOUT_SEC,
)
from .errors import MissingCredentials, RequestRejected, TransportError
from . import http_client


def _is_success(status_code):
    return 200 <= status_code < 300


def heartbeat_payload(username):
    return {
        "username": username,
        "os": HEARTBEAT_CLIENT_OS,
        "speed": HEARTBEAT_SPEED,
        "newauth": HEARTBEAT_NEWAUTH,
    }


def login_payload(username, password, ip_address, mac_address):
    return {
        "userName": username,
        "userPass": password,
        "uaddress": ip_address or "",
        "umac": mac_address or "",
        "agreed": LOGIN_AGREED,
        "acip": ACIP,
        "authType": LOGIN_AUTH_TYPE,
    }


class PortalClient:
    """Stateless apart from its HTTP session."""

    def __init__(self, session=None, timeout=REQUEST_TIMEOUT_SEC):
        self.session = session if session is not None else http_client.create_session()
        self.timeout = timeout

    def reset(self):
        """Rebuild the transport after an unexpected error. Cookies are lost."""
        self.session = http_client.reset_session(self.session)

    # ─── Probe ───────────────────────────────────────────────

    def probe_connectivity(self) -> bool:
        """True iff the check URL answers 200 with the sentinel body."""
        try:
            resp = self.session.get(CHECK_URL, timeout=self.timeout)
            if resp.status_code != 200:
                log.debug("Probe: HTTP %d", resp.status_code)
                return False
            return resp.text.strip() == CHECK_SENTINEL
        except requests.RequestException as e:
            log.debug("Probe error: %s", e)
            return False

    # ─── Heartbeat ───────────────────────────────────────────

    def heartbeat(self, username) -> bool:
        """Keep the portal session alive. Returns True on HTTP success."""
        try:
            resp = self.session.post(
                HEARTBEAT_URL,
                data=heartbeat_payload(username),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.warning("Heartbeat connection error: %s", e)
            return False

        if _is_success(resp.status_code):
            log.debug("Heartbeat OK")
            return True
        log.warning("Heartbeat failed: HTTP %d", resp.status_code)
        return False

    # ─── Login ───────────────────────────────────────────────

    def login(self, username, password, ip_address="", mac_address=""):
        """
        Submit the login form. Returns None on HTTP success.

        Raises MissingCredentials (no request made), RequestRejected or
        TransportError. The response body is not checked for a portal-level
        failure message; a 2xx is taken as success.
        """
        if not username or not password:
            raise MissingCredentials()

        log.info("Logging in with username '%s'...", username)
        try:
            resp = self.session.post(
                LOGIN_URL,
                data=login_payload(username, password, ip_address, mac_address),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Login request failed: {e}") from e

        if not _is_success(resp.status_code):
            raise RequestRejected(resp.status_code)

        log.debug("Login response: %s", resp.text[:500])
        log.info("Login request sent successfully.")
