"""
Connection Coordinator - resolves devices and serializes radio access
Scans populate the discovery cache; connects use the cache or a targeted scan
"""

import logging
from typing import Any, Dict, List, Optional

from database.models import SavedDevice
from database.store import DeviceStore
from discovery.cache import DiscoveryCache
from discovery.errors import AlreadyScanningError, ConnectFailedError, DeviceNotFoundError
from discovery.models import (
    ConnectionAttempt,
    ConnectOutcome,
    DiscoveredDevice,
    HardwareAddress,
    ScanEndReason,
    ScanResult,
)
from discovery.session import RadioGate, ScanSession
from radio.base import RadioDriver, RadioDriverError

logger = logging.getLogger(__name__)

DEFAULT_SCAN_SECONDS = 5.0
DEFAULT_CONNECT_SCAN_SECONDS = 7.0


class ConnectionCoordinator:
    """Owns the radio gate, the discovery cache and the connected device"""

    def __init__(self, driver: RadioDriver, store: DeviceStore,
                 scan_duration: float = DEFAULT_SCAN_SECONDS,
                 connect_scan_duration: float = DEFAULT_CONNECT_SCAN_SECONDS,
                 max_scan_duration: Optional[float] = None):
        self.driver = driver
        self.store = store
        self.scan_duration = scan_duration
        self.connect_scan_duration = connect_scan_duration
        self.max_scan_duration = max_scan_duration

        self.cache = DiscoveryCache()
        self.gate = RadioGate()
        self.connected: Optional[DiscoveredDevice] = None

    @classmethod
    def from_config(cls, driver: RadioDriver, store: DeviceStore, config: Dict) -> "ConnectionCoordinator":
        bt = config['bluetooth']
        return cls(
            driver,
            store,
            scan_duration=bt['scan_duration_seconds'],
            connect_scan_duration=bt['connect_scan_timeout_seconds'],
            max_scan_duration=bt['max_scan_duration_seconds'],
        )

    @property
    def scanning(self) -> bool:
        return self.gate.busy

    def _new_session(self, duration: float, target: Optional[HardwareAddress] = None,
                     owner: Optional[object] = None) -> ScanSession:
        return ScanSession(self.driver, self.cache, self.gate, duration, target, owner)

    # ================== SCANNING ==================

    async def scan_devices(self, duration: Optional[float] = None) -> ScanResult:
        """
        Run a general scan and return every device seen.
        Fails fast with AlreadyScanningError while another scan holds the radio.
        """
        if duration is None:
            duration = self.scan_duration
        if self.max_scan_duration is not None:
            duration = min(duration, self.max_scan_duration)

        session = self._new_session(duration)
        await session.start()
        result = await session.wait()
        if result.interrupted:
            logger.warning(f"Scan was {result.reason.value}; returning {len(result.devices)} partial results")
        return result

    async def stop_scan(self) -> Optional[ScanResult]:
        """Abort the active scan, if any"""
        session = self.gate.active
        if session is None:
            return None
        return await session.stop()

    # ================== CONNECTING ==================

    async def connect_device(self, raw_address: str) -> str:
        """Connect to a device and return its display name"""
        attempt = await self.attempt_connect(raw_address)
        if attempt.outcome is ConnectOutcome.NOT_FOUND:
            raise DeviceNotFoundError(attempt.address.display)
        if attempt.outcome is ConnectOutcome.FAILED:
            raise ConnectFailedError(attempt.address.display, attempt.reason)
        return attempt.display_name

    async def attempt_connect(self, raw_address: str) -> ConnectionAttempt:
        """
        Resolve the address from the cache or a targeted scan, then connect.
        A general scan in progress is preempted; another connect attempt is not.
        The radio stays reserved for this attempt until it finishes.
        """
        address = HardwareAddress.parse(raw_address)
        attempt = ConnectionAttempt(address=address)

        self.gate.reserve(attempt)
        try:
            await self._preempt_general_scan()
            return await self._connect(attempt)
        finally:
            self.gate.unreserve(attempt)

    async def _connect(self, attempt: ConnectionAttempt) -> ConnectionAttempt:
        address = attempt.address
        device = self.cache.lookup(address)
        if device is None:
            logger.info(f"Device {address.display} not in cache. Starting a new scan to find it...")
            session = self._new_session(self.connect_scan_duration, target=address, owner=attempt)
            await session.start()
            result = await session.wait()
            device = result.target
            if device is None:
                logger.warning(f"Device {address.display} not found within {self.connect_scan_duration}s")
                attempt.outcome = ConnectOutcome.NOT_FOUND
                return attempt

        attempt.device = device
        try:
            name = await self.driver.connect(device.handle)
        except RadioDriverError as e:
            logger.error(f"Failed to connect to {address.display}: {e}")
            attempt.outcome = ConnectOutcome.FAILED
            attempt.reason = str(e) or e.__class__.__name__
            return attempt

        attempt.display_name = name or device.name
        attempt.outcome = ConnectOutcome.CONNECTED
        self.connected = device
        logger.info(f"Connected to {attempt.display_name} [{address.display}]")
        return attempt

    async def _preempt_general_scan(self) -> None:
        session = self.gate.active
        if session is None:
            return
        if session.targeted:
            raise AlreadyScanningError("A connection attempt is already searching for a device.")
        logger.info("Stopping in-progress scan to prioritize connection request")
        # Awaiting the full stop keeps connect out of the stop/unregister window
        await session.stop(ScanEndReason.PREEMPTED)

    async def disconnect_device(self) -> Optional[DiscoveredDevice]:
        """Disconnect the connected device; returns it, or None if nothing was connected"""
        device = self.connected
        if device is None:
            return None
        try:
            await self.driver.disconnect()
        except RadioDriverError as e:
            logger.error(f"Failed to disconnect from {device.address.display}: {e}")
            raise
        self.connected = None
        logger.info(f"Disconnected from {device.name} [{device.address.display}]")
        return device

    async def release_radio(self) -> None:
        """Stop any scan and drop the connected device; used on shutdown"""
        await self.stop_scan()
        try:
            await self.disconnect_device()
        except RadioDriverError as e:
            logger.warning(f"Disconnect during shutdown failed: {e}")

    # ================== SAVED DEVICES ==================

    async def save_device(self, raw_address: str, name: Optional[str] = None) -> SavedDevice:
        """Remember a device; saving the same address twice keeps one record"""
        device = SavedDevice.create(raw_address, name)
        await self.store.append(device)
        return device

    async def list_previous_devices(self) -> List[SavedDevice]:
        return await self.store.load()

    def status(self) -> Dict[str, Any]:
        session = self.gate.active
        return {
            "scanning": session is not None,
            "scan_kind": None if session is None else ("targeted" if session.targeted else "general"),
            "connected": self.connected.to_dict() if self.connected else None,
            "cached_devices": len(self.cache),
        }
