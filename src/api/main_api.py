"""
Main FastAPI application setup
Local HTTP API for Wi-Fi and Bluetooth connectivity management
"""

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from typing import Dict
from pathlib import Path
import logging

from .bluetooth_routes import create_bluetooth_routes
from .system_routes import create_system_routes
from .wifi_routes import create_wifi_routes

logger = logging.getLogger(__name__)


class NexusAPI:
    """Local HTTP API for Wi-Fi and Bluetooth management"""

    def __init__(self, coordinator, wifi_service, config: Dict):
        self.coordinator = coordinator
        self.wifi = wifi_service
        self.config = config
        self.app = FastAPI(
            title="Net Nexus Portal",
            description="Local API for Wi-Fi and Bluetooth connectivity management",
            version="1.0.0"
        )
        self._setup_routes()

    def _setup_routes(self):
        """Setup FastAPI routes using modular approach"""
        self.app.include_router(create_wifi_routes(self.wifi))
        self.app.include_router(create_bluetooth_routes(self.coordinator))
        self.app.include_router(create_system_routes(self.coordinator, self.wifi))

        self._setup_static_routes()

    def _setup_static_routes(self):
        """Serve the portal UI when a static directory is configured"""
        static_dir = self.config.get('api', {}).get('static_dir')
        if not static_dir or not Path(static_dir).is_dir():
            logger.info("No static directory configured - serving API only")
            return

        # Mounted last so /api routes take precedence; html=True serves index.html at /
        self.app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
        logger.info(f"Serving static files from {static_dir}")
