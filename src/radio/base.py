"""
Radio driver interface shared by the scan session and connection coordinator
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)


class RadioDriverError(Exception):
    """Driver-level failure"""


class DriverBusyError(RadioDriverError):
    """Radio is busy with another operation"""


class DeviceUnreachableError(RadioDriverError):
    """Device did not respond or moved out of range"""


class AuthRequiredError(RadioDriverError):
    """Device requires pairing or authentication"""


@dataclass
class DiscoveryEvent:
    """Single advertisement reported by the driver"""
    address: str
    name: Optional[str] = None
    handle: Any = field(default=None, repr=False)


DiscoveryHandler = Callable[[DiscoveryEvent], None]


class DiscoverySubscription:
    """Registered discovery handler; close() unregisters it exactly once"""

    def __init__(self, driver: "RadioDriver", handler: DiscoveryHandler):
        self._driver = driver
        self.handler = handler
        self.closed = False

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._driver.remove_handler(self.handler)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class RadioDriver(ABC):
    """Process-wide radio. Supports one discovery operation at a time."""

    def __init__(self):
        self._handlers: List[DiscoveryHandler] = []

    def subscribe(self, handler: DiscoveryHandler) -> DiscoverySubscription:
        self._handlers.append(handler)
        return DiscoverySubscription(self, handler)

    def remove_handler(self, handler: DiscoveryHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def emit(self, event: DiscoveryEvent) -> None:
        """Dispatch a discovery event to every registered handler in order"""
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Discovery handler failed for {event.address}: {e}")

    @abstractmethod
    async def start_discovery(self) -> None:
        ...

    @abstractmethod
    async def stop_discovery(self) -> None:
        ...

    @abstractmethod
    async def connect(self, handle: Any) -> Optional[str]:
        """Connect to a discovered device; returns the device name when known"""

    @abstractmethod
    async def disconnect(self) -> None:
        ...
