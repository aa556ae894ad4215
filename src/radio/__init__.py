"""
Radio driver adapters
"""

from .base import (
    RadioDriver,
    DiscoveryEvent,
    DiscoverySubscription,
    RadioDriverError,
    DriverBusyError,
    DeviceUnreachableError,
    AuthRequiredError,
)

__all__ = [
    'RadioDriver', 'DiscoveryEvent', 'DiscoverySubscription', 'RadioDriverError',
    'DriverBusyError', 'DeviceUnreachableError', 'AuthRequiredError',
]
