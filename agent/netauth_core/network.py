"""
Local network identity — MAC address and local IPv4, both best-effort.

The MAC is derived once at startup and passed around; it never changes for
the lifetime of the process.
"""

import socket
import uuid

from .config import log
from .constants import ACIP, NULL_MAC


def get_mac_address():
    """
    12 lowercase hex digits, no separators (the portal's `umac` format).
    Falls back to all zeros when the OS gives us only a random node id.
    """
    node = uuid.getnode()
    # Bit 40 set → uuid made the node up
    if (node >> 40) & 0x01:
        log.warning("Could not read a hardware MAC address, using %s", NULL_MAC)
        return NULL_MAC
    return f"{node:012x}"


def detect_local_ip(probe_host=ACIP, port=80):
    """
    Local IPv4 of the interface that routes to the portal. A UDP connect
    sends no packets; it only asks the kernel for a route. Returns "" when
    there is no route.
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.connect((probe_host, port))
            return sock.getsockname()[0]
        finally:
            sock.close()
    except OSError as e:
        log.debug("Local IP detection failed: %s", e)
        return ""
