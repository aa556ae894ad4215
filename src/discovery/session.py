"""
Scan session lifecycle: start, event subscription, timed or early stop, result
"""

import asyncio
import logging
from typing import Optional

from radio.base import DiscoveryEvent, DiscoverySubscription, RadioDriver

from .cache import DiscoveryCache
from .errors import AlreadyScanningError, DriverStopError
from .models import (
    UNKNOWN_DEVICE_NAME,
    DiscoveredDevice,
    HardwareAddress,
    ScanEndReason,
    ScanResult,
    ScanState,
)

logger = logging.getLogger(__name__)


class RadioGate:
    """
    Single-slot claim on the radio: at most one active scan session.

    A connect request reserves the radio for its whole attempt; while reserved,
    only sessions started on behalf of that request can claim it.
    """

    def __init__(self):
        self.active: Optional["ScanSession"] = None
        self.reserved_by: Optional[object] = None

    @property
    def busy(self) -> bool:
        return self.active is not None

    def reserve(self, owner: object) -> None:
        if self.reserved_by is not None and self.reserved_by is not owner:
            raise AlreadyScanningError("A connection attempt is already in progress.")
        self.reserved_by = owner

    def unreserve(self, owner: object) -> None:
        if self.reserved_by is owner:
            self.reserved_by = None

    def acquire(self, session: "ScanSession") -> None:
        # No await between check and set, so this is atomic on the event loop
        if self.active is not None and self.active is not session:
            raise AlreadyScanningError()
        if self.reserved_by is not None and self.reserved_by is not session.owner:
            raise AlreadyScanningError("The radio is reserved for a connection attempt.")
        self.active = session

    def release(self, session: "ScanSession") -> None:
        if self.active is session:
            self.active = None


class ScanSession:
    """
    One discovery operation against the radio.

    Idle -> Scanning -> (Completed | Stopping -> Completed). The first terminal
    event (timer, target match or stop) wins; later ones are no-ops.
    """

    def __init__(self, driver: RadioDriver, cache: DiscoveryCache, gate: RadioGate,
                 duration: float, target: Optional[HardwareAddress] = None,
                 owner: Optional[object] = None):
        if duration <= 0:
            raise ValueError(f"Scan duration must be positive, got {duration}")
        self.driver = driver
        self.cache = cache
        self.gate = gate
        self.duration = duration
        self.target = target
        self.owner = owner

        self.state = ScanState.IDLE
        self.started_at: Optional[float] = None

        self._subscription: Optional[DiscoverySubscription] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._terminating = False
        self._future: Optional[asyncio.Future] = None
        self._result: Optional[ScanResult] = None
        self._completion: Optional[asyncio.Task] = None
        self._start_done = asyncio.Event()

    @property
    def active(self) -> bool:
        return self.state in (ScanState.SCANNING, ScanState.STOPPING)

    @property
    def targeted(self) -> bool:
        return self.target is not None

    @property
    def result(self) -> Optional[ScanResult]:
        return self._result

    async def start(self) -> None:
        """Claim the radio, subscribe to discovery events and arm the timer"""
        if self.state is not ScanState.IDLE:
            raise RuntimeError("Scan session can only be started once")

        self.gate.acquire(self)
        loop = asyncio.get_running_loop()
        self.state = ScanState.SCANNING
        self.started_at = loop.time()
        self._future = loop.create_future()
        self.cache.clear()
        self._subscription = self.driver.subscribe(self._on_discovered)

        try:
            await self.driver.start_discovery()
        except Exception as e:
            logger.error(f"Bluetooth scan error: {e}")
            self._start_done.set()
            # A stop that arrived mid-start resolves the session itself
            if not self._terminating:
                self._terminating = True
                self._subscription.close()
                self._resolve(ScanResult([], ScanEndReason.STOPPED, 0.0))
            raise
        self._start_done.set()

        if not self._terminating:
            self._timer = loop.call_later(self.duration, self._on_timeout)

        if self.targeted:
            logger.info(f"Targeted scan for {self.target.display} started ({self.duration}s)")
        else:
            logger.info(f"Scan started ({self.duration}s)")

    async def wait(self) -> ScanResult:
        """Suspend until the session resolves"""
        if self._result is not None:
            return self._result
        if self._future is None:
            raise RuntimeError("Scan session was not started")
        return await asyncio.shield(self._future)

    async def run(self) -> ScanResult:
        await self.start()
        return await self.wait()

    async def stop(self, reason: ScanEndReason = ScanEndReason.STOPPED) -> ScanResult:
        """Abort early and return whatever was collected. No-op once completed."""
        if self.state is ScanState.IDLE:
            return ScanResult([], reason, 0.0)
        if self._result is not None:
            return self._result
        self._terminate(reason)
        return await self.wait()

    async def __aenter__(self) -> "ScanSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    def _on_discovered(self, event: DiscoveryEvent) -> None:
        if self.state is not ScanState.SCANNING:
            return
        try:
            address = HardwareAddress.parse(event.address)
        except ValueError:
            logger.debug("Ignoring discovery event without an address")
            return

        device = DiscoveredDevice(address=address, name=event.name or UNKNOWN_DEVICE_NAME,
                                  handle=event.handle)
        if self.cache.upsert(device):
            logger.info(f"Discovered: {device.name} [{address.display}]")

        if self.target is not None and address.matches(self.target):
            logger.info(f"Found device {address.display} via targeted scan.")
            self._terminate(ScanEndReason.TARGET_FOUND, self.cache.lookup(address))

    def _on_timeout(self) -> None:
        self._timer = None
        self._terminate(ScanEndReason.TIMEOUT)

    def _terminate(self, reason: ScanEndReason, target: Optional[DiscoveredDevice] = None) -> bool:
        """Resolution gate: only the first terminal event proceeds"""
        if self._terminating:
            return False
        self._terminating = True
        self.state = ScanState.STOPPING

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._subscription is not None:
            self._subscription.close()

        self._completion = asyncio.get_running_loop().create_task(self._complete(reason, target))
        return True

    async def _complete(self, reason: ScanEndReason, target: Optional[DiscoveredDevice]) -> None:
        try:
            # Stopping before the driver finished starting would leave it scanning
            await self._start_done.wait()
            await self.driver.stop_discovery()
        except Exception as e:
            # Collected results stay valid; cleanup failure is not the session's outcome
            logger.error(f"{DriverStopError(e)} (keeping {len(self.cache)} collected devices)")
        finally:
            elapsed = asyncio.get_running_loop().time() - self.started_at
            self._resolve(ScanResult(
                devices=list(self.cache.values()),
                reason=reason,
                duration_seconds=elapsed,
                target=target,
            ))
        logger.info(f"Scan finished ({reason.value}): {len(self._result.devices)} devices in {elapsed:.1f}s")

    def _resolve(self, result: ScanResult) -> None:
        self._result = result
        self.state = ScanState.COMPLETED
        self.gate.release(self)
        if self._future is not None and not self._future.done():
            self._future.set_result(result)
