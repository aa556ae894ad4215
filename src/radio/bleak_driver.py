"""
Bluetooth Low Energy driver backed by bleak
"""

import asyncio
import logging
from typing import Any, Optional

from bleak import BleakClient, BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakDBusError, BleakDeviceNotFoundError, BleakError

from .base import (
    AuthRequiredError,
    DeviceUnreachableError,
    DiscoveryEvent,
    DriverBusyError,
    RadioDriver,
    RadioDriverError,
)

logger = logging.getLogger(__name__)

# BlueZ error names that map onto the driver error taxonomy
_BUSY_DBUS_ERRORS = ("org.bluez.Error.InProgress", "org.bluez.Error.Busy")
_AUTH_DBUS_ERRORS = (
    "org.bluez.Error.AuthenticationFailed",
    "org.bluez.Error.AuthenticationRejected",
    "org.bluez.Error.NotPermitted",
    "org.bluez.Error.NotAuthorized",
)


class BleakRadioDriver(RadioDriver):
    """BLE radio using BleakScanner for discovery and BleakClient for connections"""

    def __init__(self, connect_timeout: float = 20.0):
        super().__init__()
        self.connect_timeout = connect_timeout
        self._scanner: Optional[BleakScanner] = None
        self._client: Optional[BleakClient] = None
        self._scanning = False
        self._discovery_lock = asyncio.Lock()

    @property
    def scanning(self) -> bool:
        return self._scanning

    @property
    def connected_address(self) -> Optional[str]:
        if self._client and self._client.is_connected:
            return self._client.address
        return None

    def _detection_callback(self, device: BLEDevice, advertisement_data: AdvertisementData):
        name = advertisement_data.local_name or device.name
        self.emit(DiscoveryEvent(address=device.address, name=name, handle=device))

    async def start_discovery(self) -> None:
        async with self._discovery_lock:
            if self._scanner is None:
                self._scanner = BleakScanner(detection_callback=self._detection_callback)
            try:
                await self._scanner.start()
            except BleakDBusError as e:
                raise _translate_dbus_error(e) from e
            except BleakError as e:
                raise RadioDriverError(f"Failed to start BLE scan: {e}") from e
            self._scanning = True
        logger.info("Bluetooth scanning started...")

    async def stop_discovery(self) -> None:
        # Waits out an in-flight start so the stop is never skipped
        async with self._discovery_lock:
            if self._scanner is None or not self._scanning:
                return
            self._scanning = False
            try:
                await self._scanner.stop()
            except BleakError as e:
                raise RadioDriverError(f"Failed to stop BLE scan: {e}") from e
        logger.info("Bluetooth scanning stopped.")

    async def connect(self, handle: Any) -> Optional[str]:
        if self._client is not None and self._client.is_connected:
            await self.disconnect()

        client = BleakClient(handle, timeout=self.connect_timeout)
        try:
            await client.connect()
        except BleakDeviceNotFoundError as e:
            raise DeviceUnreachableError(f"Device {e.identifier} is no longer reachable") from e
        except BleakDBusError as e:
            raise _translate_dbus_error(e) from e
        except (asyncio.TimeoutError, OSError) as e:
            raise DeviceUnreachableError(f"Timeout connecting to device: {e}") from e
        except BleakError as e:
            raise RadioDriverError(str(e)) from e

        self._client = client
        return getattr(handle, "name", None)

    async def disconnect(self) -> None:
        client, self._client = self._client, None
        if client is None:
            return
        try:
            await client.disconnect()
        except BleakError as e:
            raise RadioDriverError(f"Failed to disconnect: {e}") from e


def _translate_dbus_error(error: BleakDBusError) -> RadioDriverError:
    if error.dbus_error in _BUSY_DBUS_ERRORS:
        return DriverBusyError(str(error))
    if error.dbus_error in _AUTH_DBUS_ERRORS:
        return AuthRequiredError(str(error))
    return RadioDriverError(str(error))
