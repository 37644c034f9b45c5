"""
Error taxonomy.

Everything the core raises derives from NetAuthError. Login failures are
AuthError subclasses so the control loop can catch them in one place.
"""


class NetAuthError(Exception):
    """Base class for all NetAuth errors."""


class AuthError(NetAuthError):
    """A login attempt did not succeed."""


class MissingCredentials(AuthError):
    def __init__(self, message="Missing credentials"):
        super().__init__(message)


class RequestRejected(AuthError):
    """The portal answered with a non-2xx status."""

    def __init__(self, status_code):
        self.status_code = status_code
        super().__init__(f"Status code: {status_code}")


class TransportError(AuthError):
    """DNS, TCP, TLS or timeout failure talking to the portal."""


class ConfigError(NetAuthError):
    """Malformed configuration or failure writing it."""


class SecureStoreUnavailable(NetAuthError):
    """The OS keyring is missing, locked or failing."""
