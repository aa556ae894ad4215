"""
Scan-scoped cache of discovered devices
"""

from typing import Dict, Iterator, Optional

from .models import DiscoveredDevice, HardwareAddress


class DiscoveryCache:
    """Devices seen during the current scan, keyed by normalized address"""

    def __init__(self):
        self._devices: Dict[str, DiscoveredDevice] = {}

    def clear(self) -> None:
        self._devices.clear()

    def upsert(self, device: DiscoveredDevice) -> bool:
        """
        Insert a device unless its address is already cached.
        The first-seen entry wins so its handle stays valid for connecting.
        Returns True when the device was new.
        """
        if device.address.key in self._devices:
            return False
        self._devices[device.address.key] = device
        return True

    def lookup(self, address: HardwareAddress) -> Optional[DiscoveredDevice]:
        return self._devices.get(address.key)

    def values(self) -> Iterator[DiscoveredDevice]:
        """Cached devices in insertion order"""
        return iter(list(self._devices.values()))

    def __len__(self) -> int:
        return len(self._devices)

    def __contains__(self, address: HardwareAddress) -> bool:
        return address.key in self._devices
