"""
HTTP session for the portal: pooled connections, persistent cookies, and the
captive portal's TLS policy.

The portal's login endpoint serves a certificate signed by an internal CA, so
certificate verification is disabled for this session and urllib3's
InsecureRequestWarning is silenced. This is a deliberate policy for this one
portal, not an oversight.

Only connection failures are retried. A request that reached the portal is
never replayed, so one login call is one login on the portal side.
"""

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .constants import USER_AGENT

urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

_retry_strategy = Retry(
    total=2,
    connect=2,
    read=0,
    status=0,
    backoff_factor=0.5,                         # Wait 0.5s, 1s between retries
    allowed_methods=["GET"],
    raise_on_status=False,
)


def create_session():
    """Create a new requests.Session with pooling, cookie jar and TLS policy."""
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=2,
        pool_maxsize=2,
        max_retries=_retry_strategy,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = False
    session.headers.update({"User-Agent": USER_AGENT})
    return session


def reset_session(session):
    """Close and recreate the HTTP session (drops cookies and stale connections)."""
    try:
        session.close()
    except Exception:
        pass
    return create_session()
