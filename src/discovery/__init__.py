"""
Discovery module for radio scan sessions and the scan-scoped device cache
"""

from .cache import DiscoveryCache
from .errors import (
    NexusError,
    AlreadyScanningError,
    DeviceNotFoundError,
    ConnectFailedError,
    DriverStopError,
    PersistenceError,
)
from .models import (
    HardwareAddress,
    DiscoveredDevice,
    ScanState,
    ScanEndReason,
    ScanResult,
    ConnectOutcome,
    ConnectionAttempt,
)
from .session import RadioGate, ScanSession

__all__ = [
    'DiscoveryCache', 'RadioGate', 'ScanSession',
    'HardwareAddress', 'DiscoveredDevice', 'ScanState', 'ScanEndReason', 'ScanResult',
    'ConnectOutcome', 'ConnectionAttempt',
    'NexusError', 'AlreadyScanningError', 'DeviceNotFoundError', 'ConnectFailedError',
    'DriverStopError', 'PersistenceError',
]
