"""
Constants, portal endpoints, static form fields and loop cadences.
"""

NETAUTH_VERSION = "0.3.0"
APP_NAME = "KMITL NetAuth"

# ─── Portal endpoints ────────────────────────────────────────────
LOGIN_URL = "https://portal.kmitl.ac.th:19008/portalauth/login"
HEARTBEAT_URL = "https://nani.csc.kmitl.ac.th/network-api/data/"
CHECK_URL = "http://detectportal.firefox.com/success.txt"
CHECK_SENTINEL = "success"

ACIP = "10.252.13.10"          # Fixed access-controller IP expected by the portal

# ─── Static form fields ──────────────────────────────────────────
HEARTBEAT_CLIENT_OS = "Chrome v116.0.5845.141 on Windows 10 64-bit"
HEARTBEAT_SPEED = "1.29"
HEARTBEAT_NEWAUTH = "1"

LOGIN_AGREED = "1"
LOGIN_AUTH_TYPE = "1"

USER_AGENT = f"kmitlnetauth/{NETAUTH_VERSION}"

# ─── Network ─────────────────────────────────────────────────────
REQUEST_TIMEOUT_SEC = 10       # Every portal request, probe included

# ─── Loop cadence ────────────────────────────────────────────────
DEFAULT_INTERVAL_SEC = 300     # Probe every 5 minutes
DEFAULT_MAX_ATTEMPT = 20       # Logins while offline before cooldown
COOLDOWN_SEC = 60              # Fixed, independent of the interval
PAUSED_POLL_SEC = 5            # Re-check the pause switch every 5s
ERROR_RETRY_SEC = 10           # After an unexpected error inside a cycle
MAX_INTERVAL_SEC = 86400       # Longest accepted interval: one day
MAX_LOGIN_ATTEMPTS = 1000      # Largest accepted max_attempt

# ─── Secure store ────────────────────────────────────────────────
SERVICE_NAME = "kmitlnetauth"

NULL_MAC = "000000000000"
