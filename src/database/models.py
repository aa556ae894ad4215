"""
Saved device records
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from discovery.models import UNKNOWN_DEVICE_NAME, HardwareAddress


@dataclass(frozen=True)
class SavedDevice:
    """Previously connected device remembered across restarts"""
    address: str  # uppercase display form
    name: str = UNKNOWN_DEVICE_NAME

    @classmethod
    def create(cls, address: str, name: Optional[str] = None) -> "SavedDevice":
        return cls(address=HardwareAddress.parse(address).display, name=name or UNKNOWN_DEVICE_NAME)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SavedDevice":
        return cls.create(data['address'], data.get('name'))

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "address": self.address}

    @property
    def key(self) -> str:
        return self.address.lower()
