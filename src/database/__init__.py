"""
Database module for saved device persistence
"""

from typing import Dict

from .models import SavedDevice
from .store import DeviceStore, JsonDeviceStore
from .manager import PostgresDeviceStore


def create_device_store(config: Dict) -> DeviceStore:
    """Build the device store selected by storage.backend"""
    storage = config['storage']
    if storage['backend'] == 'postgres':
        return PostgresDeviceStore(storage['postgres'])
    return JsonDeviceStore(storage['path'])


__all__ = ['DeviceStore', 'JsonDeviceStore', 'PostgresDeviceStore', 'SavedDevice', 'create_device_store']
