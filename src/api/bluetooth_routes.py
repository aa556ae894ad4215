"""
Bluetooth discovery, connection and saved-device API routes
"""

from fastapi import APIRouter, HTTPException, Query, Response
from pydantic import BaseModel
from typing import Optional
import logging

from discovery.errors import AlreadyScanningError, PersistenceError
from discovery.models import ConnectOutcome
from radio.base import RadioDriverError

logger = logging.getLogger(__name__)


# Request models
class BluetoothConnectRequest(BaseModel):
    address: Optional[str] = None


class BluetoothSaveRequest(BaseModel):
    address: Optional[str] = None
    name: Optional[str] = None


def create_bluetooth_routes(coordinator):
    """Create Bluetooth routes backed by the connection coordinator"""
    router = APIRouter(prefix="/api", tags=["bluetooth"])

    @router.get("/bluetooth-devices")
    async def scan_bluetooth_devices(response: Response,
                                     duration: Optional[float] = Query(None, gt=0)):
        """Scan for nearby Bluetooth devices"""
        try:
            result = await coordinator.scan_devices(duration)
        except AlreadyScanningError as e:
            raise HTTPException(status_code=429, detail=str(e))
        except RadioDriverError as e:
            logger.error(f"Bluetooth scan error: {e}")
            raise HTTPException(status_code=500, detail={
                "error": "Failed to scan for Bluetooth devices", "details": str(e)
            })

        if result.interrupted:
            response.headers["X-Scan-Interrupted"] = "true"
        return [device.to_dict() for device in result.devices]

    @router.post("/bluetooth-connect")
    async def connect_bluetooth_device(request: BluetoothConnectRequest):
        """Connect to a device from the last scan, or find it with a targeted scan"""
        if not request.address:
            raise HTTPException(status_code=400, detail="Device address is required.")

        try:
            attempt = await coordinator.attempt_connect(request.address)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except AlreadyScanningError as e:
            raise HTTPException(status_code=429, detail=str(e))

        if attempt.outcome is ConnectOutcome.NOT_FOUND:
            raise HTTPException(
                status_code=404,
                detail="Device not found. Please ensure it is nearby and discoverable, then refresh the list."
            )
        if attempt.outcome is ConnectOutcome.FAILED:
            raise HTTPException(status_code=500, detail={
                "error": "Failed to connect to device", "details": attempt.reason
            })
        return {"message": f"Successfully connected to {attempt.display_name}",
                "name": attempt.display_name,
                "address": attempt.address.display}

    @router.post("/bluetooth-disconnect")
    async def disconnect_bluetooth_device():
        """Disconnect the currently connected device"""
        try:
            device = await coordinator.disconnect_device()
        except RadioDriverError as e:
            raise HTTPException(status_code=500, detail={
                "error": "Failed to disconnect device", "details": str(e)
            })
        if device is None:
            return {"message": "No Bluetooth device is connected."}
        return {"message": f"Disconnected from {device.name}"}

    @router.post("/bluetooth-save")
    async def save_bluetooth_device(request: BluetoothSaveRequest):
        """Remember a device for later connections"""
        if not request.address:
            raise HTTPException(status_code=400, detail="Device address is required.")
        try:
            await coordinator.save_device(request.address, request.name)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except PersistenceError as e:
            logger.error(f"Failed to save device {request.address}: {e}")
            raise HTTPException(status_code=500, detail="Failed to save device.")
        return {"message": f"Successfully saved device {request.name or request.address}"}

    @router.get("/bluetooth-previous-devices")
    async def list_previous_devices():
        """List previously saved devices"""
        try:
            devices = await coordinator.list_previous_devices()
        except PersistenceError as e:
            logger.error(f"Error getting previous devices: {e}")
            raise HTTPException(status_code=500, detail="Failed to retrieve previous devices.")
        return [device.to_dict() for device in devices]

    return router
