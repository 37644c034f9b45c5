"""
KMITL NetAuth — captive portal auto-login service
==================================================
Probes for internet access every few minutes, keeps the portal session alive
with heartbeats, and logs in again when the session is dropped.

The password lives in the OS keyring when one is available; a plaintext
password in config.json (or KMITL_PASSWORD) is moved there on first run.

Usage:
    python kmitlnetauth.py [--config PATH] [--no-notify]
"""

from netauth_core.runner import run_with_auto_restart


if __name__ == "__main__":
    run_with_auto_restart()
