"""pytest configuration and shared fixtures for Net Nexus tests."""

import asyncio
from typing import Any, List, Optional, Tuple

import pytest

from database.store import JsonDeviceStore
from radio.base import DiscoveryEvent, RadioDriver
from services.connection_coordinator import ConnectionCoordinator


class FakeHandle:
    """Stand-in for a driver-level device object"""

    def __init__(self, address: str, name: Optional[str] = None):
        self.address = address
        self.name = name

    def __repr__(self):
        return f"FakeHandle({self.address!r})"


class FakeRadioDriver(RadioDriver):
    """
    Radio driver that replays planned advertisements on every start_discovery.

    `plan` holds (delay_seconds, address, name) tuples; events only reach
    handlers while discovery is running, like a real radio.
    """

    def __init__(self, plan: Optional[List[Tuple[float, str, Optional[str]]]] = None):
        super().__init__()
        self.plan = list(plan or [])
        self.discovering = False
        self.start_calls = 0
        self.stop_calls = 0
        self.connected_handles: List[Any] = []
        self.disconnect_calls = 0
        self.start_error: Optional[Exception] = None
        self.stop_error: Optional[Exception] = None
        self.connect_error: Optional[Exception] = None
        self.connect_name: Optional[str] = None
        self.start_gate: Optional[asyncio.Event] = None
        self._pending: List[asyncio.TimerHandle] = []

    def inject(self, address: str, name: Optional[str] = None, handle: Any = None) -> None:
        if not self.discovering:
            return
        self.emit(DiscoveryEvent(address=address, name=name, handle=handle or FakeHandle(address, name)))

    async def start_discovery(self) -> None:
        self.start_calls += 1
        if self.start_gate is not None:
            await self.start_gate.wait()
        if self.start_error:
            raise self.start_error
        self.discovering = True
        loop = asyncio.get_running_loop()
        for delay, address, name in self.plan:
            self._pending.append(loop.call_later(delay, self.inject, address, name))

    async def stop_discovery(self) -> None:
        self.stop_calls += 1
        self.discovering = False
        for timer in self._pending:
            timer.cancel()
        self._pending.clear()
        if self.stop_error:
            raise self.stop_error

    async def connect(self, handle: Any) -> Optional[str]:
        if self.connect_error:
            raise self.connect_error
        self.connected_handles.append(handle)
        return self.connect_name

    async def disconnect(self) -> None:
        self.disconnect_calls += 1


@pytest.fixture
def driver():
    return FakeRadioDriver()


@pytest.fixture
def store(tmp_path):
    return JsonDeviceStore(str(tmp_path / "previous_devices.json"))


@pytest.fixture
def coordinator(driver, store):
    return ConnectionCoordinator(driver, store, scan_duration=0.1, connect_scan_duration=0.1)

