"""
Net Nexus Server - Main orchestrator for all services
"""

import logging
from typing import Optional

import uvicorn

from config_loader import load_config, setup_logging
from database import create_device_store
from radio.base import RadioDriver
from radio.bleak_driver import BleakRadioDriver
from api.main_api import NexusAPI
from wifi_service import WifiService
from services.connection_coordinator import ConnectionCoordinator

logger = logging.getLogger(__name__)


class NexusServer:
    """Main server wiring the device store, radio driver, coordinator and HTTP API"""

    def __init__(self, config_path: str = "config/config.yaml", driver: Optional[RadioDriver] = None):
        self.config = load_config(config_path)
        setup_logging(self.config)

        self.store = create_device_store(self.config)
        self.driver = driver or BleakRadioDriver(
            connect_timeout=self.config['bluetooth']['connect_timeout_seconds']
        )
        self.coordinator = ConnectionCoordinator.from_config(self.driver, self.store, self.config)
        self.wifi = WifiService(self.config)
        self.api = NexusAPI(self.coordinator, self.wifi, self.config)

        self.running = False
        self._server: Optional[uvicorn.Server] = None

    async def start(self):
        """Initialize storage and serve the HTTP API until shutdown"""
        logger.info("Starting Net Nexus portal...")

        try:
            await self.store.initialize()
            logger.info("Device store initialized")

            self.running = True
            await self._start_api_server()

        except Exception as e:
            logger.error(f"Server startup failed: {e}")
            raise

    async def stop(self):
        """Stop all server services gracefully"""
        if not self.running:
            return
        logger.info("Stopping server...")
        self.running = False

        if self._server:
            self._server.should_exit = True

        # Release the radio before closing storage
        await self.coordinator.release_radio()
        await self.store.close()
        logger.info("Server stopped")

    async def _start_api_server(self):
        """Start the FastAPI server"""
        config = uvicorn.Config(
            self.api.app,
            host=self.config['api']['host'],
            port=self.config['api']['port'],
            log_level="info",
            access_log=False  # We handle our own logging
        )

        self._server = uvicorn.Server(config)

        logger.info(f"Net Nexus portal running at http://localhost:{self.config['api']['port']}")
        logger.info(f"API documentation: http://localhost:{self.config['api']['port']}/docs")

        await self._server.serve()
