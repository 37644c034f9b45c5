"""
Paths, logging, config load/save, the shared ConfigHandle, safe_print.
"""

import os
import sys
import json
import logging
import threading
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from .constants import (
    DEFAULT_INTERVAL_SEC, DEFAULT_MAX_ATTEMPT, MAX_INTERVAL_SEC, MAX_LOGIN_ATTEMPTS,
)
from .errors import ConfigError, SecureStoreUnavailable


# ─── Paths ───────────────────────────────────────────────────────
_FOLDER_NAME = "kmitlnetauth"
_CONFIG_NAME = "config.json"
GLOBAL_CONFIG_FILE = Path("/etc") / _FOLDER_NAME / _CONFIG_NAME


def config_dir():
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    return base / _FOLDER_NAME


def default_config_path():
    """System-wide file on Linux when it exists, per-user file otherwise."""
    if sys.platform.startswith("linux") and GLOBAL_CONFIG_FILE.exists():
        return GLOBAL_CONFIG_FILE
    return config_dir() / _CONFIG_NAME


def default_log_file():
    return config_dir() / "logs" / "service.log"


# ─── Safe print (no crash when stdout is gone) ───────────────────

def safe_print(*args, **kwargs):
    try:
        print(*args, **kwargs)
    except Exception:
        pass


# ─── Logging ─────────────────────────────────────────────────────

log = logging.getLogger("netauth")

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
_LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_log_level(name):
    """Map a config verbosity string to a logging level (unknown → INFO)."""
    return _LOG_LEVELS.get(str(name or "").strip().lower(), logging.INFO)


def setup_logging(level_name="info", log_file=None):
    """Attach stdout + file handlers to the shared logger."""
    level = parse_log_level(level_name)
    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATEFMT)

    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    log.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            if log_file.exists() and log_file.stat().st_size > 1_000_000:
                log_file.write_text("")
            file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
            file_handler.setFormatter(formatter)
            log.addHandler(file_handler)
        except OSError as e:
            log.warning("File logging disabled (%s): %s", log_file, e)

    log.setLevel(level)
    return log


# ─── Config model ────────────────────────────────────────────────

@dataclass
class NetAuthConfig:
    username: str = ""
    password: Optional[str] = None
    ip_address: Optional[str] = None
    interval: int = DEFAULT_INTERVAL_SEC
    max_attempt: int = DEFAULT_MAX_ATTEMPT
    auto_login: bool = True
    log_level: str = "info"

    def __repr__(self):
        masked = "***" if self.password else self.password
        return (
            f"NetAuthConfig(username={self.username!r}, password={masked!r}, "
            f"ip_address={self.ip_address!r}, interval={self.interval}, "
            f"max_attempt={self.max_attempt}, auto_login={self.auto_login}, "
            f"log_level={self.log_level!r})"
        )

    def to_document(self, include_password=True):
        """Persisted JSON layout. Optional fields are omitted when unset."""
        doc = {"username": self.username}
        if include_password and self.password is not None:
            doc["password"] = self.password
        if self.ip_address is not None:
            doc["ipAddress"] = self.ip_address
        doc["intervalSeconds"] = self.interval
        doc["maxLoginAttempts"] = self.max_attempt
        doc["autoLoginEnabled"] = self.auto_login
        doc["logLevel"] = self.log_level
        return doc


# JSON key → (field name, parser). Parsers raise ValueError on bad input.

def _parse_str(value):
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {type(value).__name__}")
    return value


def _positive_int(maximum):
    """Parser for an integer in 1..maximum. Whole floats (60.0) are accepted."""
    def parse(value):
        if isinstance(value, bool):
            raise ValueError("expected an integer, got a boolean")
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"expected an integer, got {value!r}")
        parsed = int(value)
        if not 0 < parsed <= maximum:
            raise ValueError(f"expected an integer between 1 and {maximum}, got {parsed}")
        return parsed
    return parse


_parse_interval = _positive_int(MAX_INTERVAL_SEC)
_parse_max_attempt = _positive_int(MAX_LOGIN_ATTEMPTS)


_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def _parse_bool(value):
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"expected a boolean, got {value!r}")


_DOCUMENT_FIELDS = {
    "username": ("username", _parse_str),
    "password": ("password", _parse_str),
    "ipAddress": ("ip_address", _parse_str),
    "intervalSeconds": ("interval", _parse_interval),
    "maxLoginAttempts": ("max_attempt", _parse_max_attempt),
    "autoLoginEnabled": ("auto_login", _parse_bool),
    "logLevel": ("log_level", _parse_str),
}

ENV_OVERRIDES = {
    "KMITL_USERNAME": ("username", _parse_str),
    "KMITL_PASSWORD": ("password", _parse_str),
    "KMITL_IP": ("ip_address", _parse_str),
    "KMITL_INTERVAL": ("interval", _parse_interval),
    "KMITL_MAX_ATTEMPT": ("max_attempt", _parse_max_attempt),
    "KMITL_AUTO_LOGIN": ("auto_login", _parse_bool),
    "KMITL_LOG_LEVEL": ("log_level", _parse_str),
}


def config_from_document(doc):
    """Build a config from a parsed document. Bad fields fall back to defaults."""
    if not isinstance(doc, dict):
        raise ConfigError(f"Config root must be a mapping, got {type(doc).__name__}")

    changes = {}
    for key, (field_name, parse) in _DOCUMENT_FIELDS.items():
        if key not in doc or doc[key] is None:
            continue
        try:
            changes[field_name] = parse(doc[key])
        except (TypeError, ValueError, OverflowError) as e:
            log.warning("Ignoring invalid config value %s: %s", key, e)
    return NetAuthConfig(**changes)


def apply_env_overrides(config, environ=None):
    """Override fields from KMITL_* variables. Unparsable values are ignored."""
    environ = os.environ if environ is None else environ
    changes = {}
    for var, (field_name, parse) in ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        try:
            changes[field_name] = parse(raw)
        except (TypeError, ValueError, OverflowError) as e:
            log.warning("Ignoring %s override: %s", var, e)
    return replace(config, **changes)


# ─── Secure-store migration ──────────────────────────────────────

def migrate_password(config, store):
    """
    Copy a plaintext password into the keyring. Returns True when the keyring
    now holds it. Failure is logged and never raised.
    """
    if store is None or not config.password or not config.username:
        return False
    try:
        store.set_password(config.username, config.password)
    except SecureStoreUnavailable as e:
        log.warning("Could not store password in keyring, keeping plaintext fallback: %s", e)
        return False
    return True


# ─── Config Management ──────────────────────────────────────────

def load_config(path, store=None, environ=None):
    """
    Load config from disk, apply env overrides, migrate the password.
    Never raises: a broken file is logged and replaced by defaults.
    """
    path = Path(path)
    config = NetAuthConfig()
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                config = config_from_document(json.load(f))
        except (ValueError, OSError, ConfigError) as e:
            log.error("Failed to load config %s: %s. Using defaults.", path, e)
            config = NetAuthConfig()

    config = apply_env_overrides(config, environ)

    if migrate_password(config, store):
        log.debug("Password for %s is in the keyring", config.username)
    return config


def save_config(config, path, store=None):
    """
    Save config to disk. The password is left out of the file whenever the
    keyring accepted it. Returns True if the password went to the keyring.
    """
    path = Path(path)
    migrated = migrate_password(config, store)
    doc = config.to_document(include_password=not migrated)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(doc, f, indent=2)
    except OSError as e:
        raise ConfigError(f"Failed to write config {path}: {e}") from e
    log.info("Config saved to %s", path)
    return migrated


class ConfigHandle:
    """
    The one live configuration, shared between the control loop and any
    front-end. Every read returns a copy; every write happens under the lock.
    """

    def __init__(self, config=None, path=None, store=None):
        self._config = config if config is not None else NetAuthConfig()
        self._lock = threading.Lock()
        self.path = Path(path) if path is not None else None
        self.store = store

    def snapshot(self) -> NetAuthConfig:
        with self._lock:
            return replace(self._config)

    def update(self, **changes) -> NetAuthConfig:
        """Apply field changes atomically. Unknown fields raise TypeError."""
        with self._lock:
            self._config = replace(self._config, **changes)
            return replace(self._config)

    def save(self):
        """Persist the current config. Raises ConfigError on I/O failure."""
        if self.path is None:
            raise ConfigError("No config path to save to")
        current = self.snapshot()
        migrated = save_config(current, self.path, self.store)
        if migrated:
            # The keyring holds it now; drop the in-memory plaintext unless it
            # was edited again while we were writing.
            with self._lock:
                if self._config.password == current.password:
                    self._config = replace(self._config, password=None)
        return migrated
