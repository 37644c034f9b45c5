"""
Credential resolution — plaintext config value first, OS keyring second.

The keyring is an external, independently synchronized resource. Nothing in
here caches a secret: callers resolve a fresh password every time they need
one and drop it after the request.
"""

from dataclasses import dataclass, field

import keyring
from keyring.errors import PasswordDeleteError

from .config import log
from .constants import SERVICE_NAME
from .errors import SecureStoreUnavailable


class CredentialStore:
    """Thin wrapper over `keyring` keyed by (service_name, username)."""

    def __init__(self, service_name=SERVICE_NAME):
        self.service_name = service_name

    def get_password(self, username):
        """Return the stored secret, or None when there is no entry."""
        try:
            return keyring.get_password(self.service_name, username)
        except Exception as e:
            # Backends raise their own exception types (dbus, secretstorage, ...)
            raise SecureStoreUnavailable(f"Failed to read from keyring: {e}") from e

    def set_password(self, username, password):
        try:
            keyring.set_password(self.service_name, username, password)
        except Exception as e:
            raise SecureStoreUnavailable(f"Failed to save password to keyring: {e}") from e

    def delete_password(self, username):
        """Remove the stored secret. Returns False when there was none."""
        try:
            keyring.delete_password(self.service_name, username)
        except PasswordDeleteError:
            return False
        except Exception as e:
            raise SecureStoreUnavailable(f"Failed to delete password from keyring: {e}") from e
        return True


def resolve_password(username, plaintext=None, store=None) -> str:
    """
    First non-empty of: plaintext config value, keyring value, "".

    A keyring failure is indistinguishable from "not configured" for the
    caller; an empty result means the login must be skipped.
    """
    if plaintext:
        return plaintext
    if not username or store is None:
        return ""
    try:
        return store.get_password(username) or ""
    except SecureStoreUnavailable as e:
        log.debug("Keyring lookup for %s failed: %s", username, e)
        return ""


@dataclass(frozen=True)
class Credentials:
    """One request's worth of credentials. Never kept past a cycle."""

    username: str
    password: str = field(repr=False)
    ip_address: str = ""
    mac_address: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.username) and bool(self.password)
