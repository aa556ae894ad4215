"""
Wi-Fi API routes
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import Optional
import logging

from wifi_service import PasswordRequiredError, WifiError

logger = logging.getLogger(__name__)


class WifiConnectRequest(BaseModel):
    ssid: Optional[str] = None
    password: Optional[str] = None


def create_wifi_routes(wifi_service):
    """Create Wi-Fi routes"""
    router = APIRouter(prefix="/api", tags=["wifi"])

    @router.get("/wifi")
    async def scan_wifi():
        """Scan for Wi-Fi networks"""
        try:
            return await wifi_service.scan()
        except WifiError as e:
            logger.error(f"Wi-Fi scan error: {e}")
            raise HTTPException(status_code=500, detail={
                "error": "Failed to scan for Wi-Fi networks", "details": str(e)
            })

    @router.get("/current-connection")
    async def current_connection():
        """Get current Wi-Fi connection"""
        try:
            return await wifi_service.current_connections()
        except WifiError as e:
            logger.error(f"Get current connection error: {e}")
            raise HTTPException(status_code=500, detail={
                "error": "Failed to get current Wi-Fi connection", "details": str(e)
            })

    @router.post("/connect")
    async def connect_wifi(request: WifiConnectRequest):
        """Connect to a Wi-Fi network"""
        if not request.ssid:
            raise HTTPException(status_code=400, detail="SSID is required")
        try:
            await wifi_service.connect(request.ssid, request.password)
        except PasswordRequiredError as e:
            # 401 tells the frontend to prompt for a password
            raise HTTPException(status_code=401, detail=str(e))
        except WifiError as e:
            logger.error(f"Failed to connect to {request.ssid}: {e}")
            raise HTTPException(status_code=500, detail={
                "error": f"Failed to connect to {request.ssid}", "details": str(e)
            })
        return {"message": f"Successfully initiated connection to {request.ssid}"}

    @router.post("/disconnect")
    async def disconnect_wifi():
        """Disconnect from the current Wi-Fi network"""
        try:
            await wifi_service.disconnect()
        except WifiError as e:
            logger.error(f"Disconnect error: {e}")
            raise HTTPException(status_code=500, detail={
                "error": "Failed to disconnect.", "details": str(e)
            })
        return {"message": "Successfully disconnected from the Wi-Fi network."}

    return router
