"""
Entry point, CLI flags, signal handling and the auto-restart wrapper.
"""

import argparse
import signal
import sys
import time

from .constants import NETAUTH_VERSION, APP_NAME
from .config import (
    log, safe_print, setup_logging, load_config, default_config_path,
    default_log_file, ConfigHandle,
)
from .credentials import CredentialStore
from .errors import SecureStoreUnavailable
from .notify import DesktopNotifier, LogNotifier
from .portal import PortalClient
from .app import ControlLoop
from . import network


def build_parser():
    parser = argparse.ArgumentParser(
        prog="kmitlnetauth",
        description="Keep this machine logged in to the KMITL captive portal.",
    )
    parser.add_argument("-c", "--config", help="path to config.json")
    parser.add_argument("--log-level", help="override the config's logLevel")
    parser.add_argument("--log-file", help="log file path (default: next to the config)")
    parser.add_argument(
        "--no-notify", action="store_true",
        help="log events only, no desktop notifications",
    )
    parser.add_argument(
        "--forget-password", action="store_true",
        help="delete the configured user's password from the keyring and exit",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {NETAUTH_VERSION}")
    return parser


def forget_password(config, store):
    """Remove the stored secret for the configured user. Returns an exit code."""
    if not config.username:
        log.error("No username configured; nothing to forget.")
        return 1
    try:
        removed = store.delete_password(config.username)
    except SecureStoreUnavailable as e:
        log.error("%s", e)
        return 1
    if removed:
        log.info("Removed keyring password for %s", config.username)
    else:
        log.info("No keyring password stored for %s", config.username)
    return 0


def install_signal_handlers(loop):
    def _handle(signum, _frame):
        log.info("Received signal %d, shutting down...", signum)
        loop.stop()

    signal.signal(signal.SIGINT, _handle)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _handle)


def main(argv=None):
    """Primary entry point. Returns a process exit code."""
    args = build_parser().parse_args(argv)

    config_path = args.config or default_config_path()
    store = CredentialStore()

    # Console logging first so config load problems are visible
    setup_logging(args.log_level or "info")
    config = load_config(config_path, store)
    setup_logging(args.log_level or config.log_level, args.log_file or default_log_file())

    log.info("Starting %s v%s", APP_NAME, NETAUTH_VERSION)
    log.info("Using config file: %s", config_path)

    if args.forget_password:
        return forget_password(config, store)

    if not config.username:
        log.error("Username not set in config. Please configure it.")
        return 1

    if not config.ip_address:
        detected = network.detect_local_ip()
        if detected:
            log.info("Using detected local IP %s", detected)
            config.ip_address = detected

    handle = ConfigHandle(config, path=config_path, store=store)
    notifier = LogNotifier() if args.no_notify else DesktopNotifier()
    loop = ControlLoop(
        handle,
        PortalClient(),
        notifier=notifier,
        store=store,
        mac_address=network.get_mac_address(),
    )

    install_signal_handlers(loop)
    safe_print("Service running.\n")
    loop.run()
    return 0


def run_with_auto_restart(argv=None):
    """
    Wrapper that auto-restarts on crash. Never gives up.
    Crash counter resets if the service ran for 2+ minutes (not a boot-loop).

    Once main() installs its handlers, Ctrl-C stops the loop and main()
    returns normally. KeyboardInterrupt only reaches here during startup
    (config load, keyring access) or while waiting to restart.
    """
    crash_count = 0
    crash_window = 120
    max_rapid_crashes = 10

    while True:
        start_time = time.time()
        try:
            code = main(argv)
            sys.exit(code)
        except KeyboardInterrupt:
            safe_print("\nStopped by user.")
            break
        except SystemExit:
            raise
        except Exception as e:
            elapsed = time.time() - start_time
            log.error("Service crashed after %.0fs: %s", elapsed, e, exc_info=True)

            if elapsed > crash_window:
                crash_count = 0
            crash_count += 1

            if crash_count >= max_rapid_crashes:
                wait = 120
                log.warning("Many rapid crashes (%d). Waiting %ds...", crash_count, wait)
            else:
                wait = min(10 * crash_count, 60)

            log.info("Restarting in %ds (crash %d)...", wait, crash_count)
            try:
                time.sleep(wait)
            except KeyboardInterrupt:
                safe_print("\nStopped by user.")
                break
