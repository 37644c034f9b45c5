"""
netauth_core — KMITL captive portal auto-login service
======================================================
Architecture: one control-loop thread, blocking requests, Event-based sleeps.

  constants.py    → Version, portal URLs, static form fields, cadences
  config.py       → Paths, logging, config load/save, ConfigHandle
  errors.py       → Error taxonomy (AuthError, ConfigError, ...)
  credentials.py  → Keyring store + password resolution
  http_client.py  → HTTP session: pooling, cookies, portal TLS policy
  network.py      → MAC address + local IP discovery
  portal.py       → PortalClient (probe, heartbeat, login)
  state.py        → Session dataclass (control-loop state) + snapshot
  notify.py       → Notification sinks (log-only, desktop)
  app.py          → ControlLoop (probe/heartbeat/login state machine)
  runner.py       → main() + CLI + auto-restart wrapper
"""
