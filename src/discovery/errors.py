"""
Error taxonomy for radio discovery and connection coordination
"""

from typing import Optional


class NexusError(Exception):
    """Base class for coordinator failures surfaced to callers"""


class AlreadyScanningError(NexusError):
    """A scan holds the radio and the request did not qualify for preemption"""

    def __init__(self, message: str = "A Bluetooth scan is already in progress."):
        super().__init__(message)


class DeviceNotFoundError(NexusError):
    """Targeted scan window elapsed without the requested address showing up"""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Device {address} not found within the time limit")


class ConnectFailedError(NexusError):
    """Driver rejected a connect request"""

    def __init__(self, address: str, reason: str):
        self.address = address
        self.reason = reason
        super().__init__(f"Failed to connect to {address}: {reason}")


class DriverStopError(NexusError):
    """Stop-discovery cleanup failed; logged, never raised to callers"""

    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(f"Failed to stop discovery: {cause}")


class PersistenceError(NexusError):
    """Device store read or write failure"""
