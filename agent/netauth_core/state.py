"""
Session — the control loop's own state.

Only the ControlLoop mutates a Session, and only under its lock. Front-ends
get a frozen StateSnapshot instead of the live object.
"""

import enum
import time
from dataclasses import dataclass
from typing import Optional


class ConnectivityState(enum.Enum):
    UNKNOWN = "unknown"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


@dataclass
class Session:
    connectivity_state: ConnectivityState = ConnectivityState.UNKNOWN

    # ── Login bookkeeping ─────────────────────────────────────
    # Non-decreasing within a disconnected streak, 0 whenever the probe passes
    consecutive_login_failures: int = 0
    last_login_time: Optional[float] = None

    # ── Heartbeat ─────────────────────────────────────────────
    last_heartbeat_time: Optional[float] = None

    # ── External pause switch ─────────────────────────────────
    paused: bool = False

    def mark_connected(self):
        """Record a passing probe. Returns True on a Disconnected → Connected edge."""
        restored = self.connectivity_state is ConnectivityState.DISCONNECTED
        self.connectivity_state = ConnectivityState.CONNECTED
        self.consecutive_login_failures = 0
        return restored

    def mark_disconnected(self):
        """Record a failing probe. Returns True on a Connected → Disconnected edge."""
        lost = self.connectivity_state is ConnectivityState.CONNECTED
        self.connectivity_state = ConnectivityState.DISCONNECTED
        return lost

    def record_heartbeat(self):
        self.last_heartbeat_time = time.time()

    def record_login(self):
        self.last_login_time = time.time()


@dataclass(frozen=True)
class StateSnapshot:
    connectivity_state: ConnectivityState
    last_heartbeat_time: Optional[float]
    username: str
    paused: bool
    consecutive_login_failures: int
