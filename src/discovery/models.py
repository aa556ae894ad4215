"""
Discovery data structures and models
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

UNKNOWN_DEVICE_NAME = "Unknown Device"


@dataclass(frozen=True)
class HardwareAddress:
    """Normalized hardware address: lowercase key for lookups, uppercase for display"""
    key: str

    @classmethod
    def parse(cls, raw: str) -> "HardwareAddress":
        if raw is None or not str(raw).strip():
            raise ValueError("Device address is required.")
        return cls(str(raw).strip().lower())

    @property
    def display(self) -> str:
        return self.key.upper()

    def matches(self, other: "HardwareAddress") -> bool:
        return self.key == other.key

    def __str__(self) -> str:
        return self.display


@dataclass
class DiscoveredDevice:
    """Device reported by the radio during an active scan"""
    address: HardwareAddress
    name: str = UNKNOWN_DEVICE_NAME
    handle: Any = field(default=None, repr=False, compare=False)

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "address": self.address.display}


class ScanState(Enum):
    """Scan session lifecycle"""
    IDLE = "idle"
    SCANNING = "scanning"
    STOPPING = "stopping"
    COMPLETED = "completed"


class ScanEndReason(Enum):
    """Terminal event that resolved a scan session"""
    TIMEOUT = "timeout"
    TARGET_FOUND = "target_found"
    STOPPED = "stopped"
    PREEMPTED = "preempted"


@dataclass
class ScanResult:
    """Materialized outcome of one scan session"""
    devices: List[DiscoveredDevice]
    reason: ScanEndReason
    duration_seconds: float
    target: Optional[DiscoveredDevice] = None

    @property
    def interrupted(self) -> bool:
        return self.reason in (ScanEndReason.STOPPED, ScanEndReason.PREEMPTED)

    @property
    def found(self) -> bool:
        return self.target is not None


class ConnectOutcome(Enum):
    """Outcome of a single connect request"""
    PENDING = "pending"
    CONNECTED = "connected"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class ConnectionAttempt:
    """Transient record for one connect request"""
    address: HardwareAddress
    device: Optional[DiscoveredDevice] = None
    outcome: ConnectOutcome = ConnectOutcome.PENDING
    reason: Optional[str] = None
    display_name: Optional[str] = None
