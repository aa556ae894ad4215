"""
System health API routes
"""

from fastapi import APIRouter
from pydantic import BaseModel
from typing import Optional, Dict
from datetime import datetime, timezone
import logging

from discovery.errors import PersistenceError

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str
    scanning: bool
    scan_kind: Optional[str]
    connected: Optional[Dict[str, str]]
    cached_devices: int
    saved_devices: Optional[int]
    wifi_enabled: bool
    error: Optional[str] = None
    timestamp: datetime


def create_system_routes(coordinator, wifi_service=None):
    """Create system monitoring routes"""
    router = APIRouter(prefix="/api", tags=["system"])

    @router.get("/system/health", response_model=HealthResponse)
    async def system_health():
        """System health check"""
        radio = coordinator.status()
        status = "healthy"
        error = None
        saved = None
        try:
            saved = len(await coordinator.list_previous_devices())
        except PersistenceError as e:
            logger.error(f"Health check could not read device store: {e}")
            status = "degraded"
            error = str(e)

        return HealthResponse(
            status=status,
            scanning=radio['scanning'],
            scan_kind=radio['scan_kind'],
            connected=radio['connected'],
            cached_devices=radio['cached_devices'],
            saved_devices=saved,
            wifi_enabled=bool(wifi_service and wifi_service.enabled),
            error=error,
            timestamp=datetime.now(timezone.utc)
        )

    return router
