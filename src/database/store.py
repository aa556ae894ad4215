"""
Device store interface and the JSON file backend
"""

import asyncio
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from discovery.errors import PersistenceError

from .models import SavedDevice

logger = logging.getLogger(__name__)


class DeviceStore(ABC):
    """Durable list of previously connected devices, at most one per address"""

    async def initialize(self) -> None:
        """Prepare backing storage"""

    async def close(self) -> None:
        """Release backing storage"""

    @abstractmethod
    async def load(self) -> List[SavedDevice]:
        """All saved devices; empty on first run"""

    @abstractmethod
    async def append(self, device: SavedDevice) -> bool:
        """Add a device unless its address is present. Returns True if added."""

    async def exists(self, address: str) -> bool:
        key = address.lower()
        return any(d.key == key for d in await self.load())


class JsonDeviceStore(DeviceStore):
    """Saved devices kept in a JSON array of {"name", "address"} objects"""

    def __init__(self, path: str = "previous_devices.json"):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Create the file with an empty list if it does not exist yet"""
        if self.path.exists():
            return
        logger.info(f"{self.path.name} not found. Creating it...")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("[]", encoding="utf-8")
        except OSError as e:
            logger.error(f"Error creating {self.path}: {e}")
            raise PersistenceError(f"Failed to create device store {self.path}: {e}") from e

    async def load(self) -> List[SavedDevice]:
        return self._read()

    async def append(self, device: SavedDevice) -> bool:
        async with self._lock:
            devices = self._read()
            if any(d.key == device.key for d in devices):
                logger.debug(f"Device {device.address} already saved")
                return False
            devices.append(device)
            self._write(devices)
        logger.info(f"Saved device {device.name} [{device.address}]")
        return True

    def _read(self) -> List[SavedDevice]:
        if not self.path.exists():
            return []
        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Error reading {self.path}: {e}")
            raise PersistenceError(f"Failed to read device store {self.path}: {e}") from e

        if not content.strip():
            return []
        try:
            data = json.loads(content)
            return [SavedDevice.from_dict(item) for item in data]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Corrupt device store {self.path}: {e}")
            raise PersistenceError(f"Corrupt device store {self.path}: {e}") from e

    def _write(self, devices: List[SavedDevice]) -> None:
        # Readers only ever see a complete file: write beside it, then swap in
        payload = json.dumps([d.to_dict() for d in devices], indent=2)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp",
                                            dir=str(self.path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            logger.error(f"Error writing {self.path}: {e}")
            raise PersistenceError(f"Failed to write device store {self.path}: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
