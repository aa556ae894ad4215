"""
ASGI entry point for uvicorn
This module exposes the FastAPI app for use with uvicorn command line
"""

import logging
import os

from config_loader import load_config, setup_logging
from database import create_device_store
from radio.bleak_driver import BleakRadioDriver
from api.main_api import NexusAPI
from wifi_service import WifiService
from services.connection_coordinator import ConnectionCoordinator

# Load configuration
config = load_config(os.environ.get('CONFIG_FILE', 'config/config.yaml'))
setup_logging(config)

logger = logging.getLogger(__name__)

# Initialize components synchronously for uvicorn
logger.info("Initializing application components...")

store = create_device_store(config)
driver = BleakRadioDriver(connect_timeout=config['bluetooth']['connect_timeout_seconds'])
coordinator = ConnectionCoordinator.from_config(driver, store, config)
wifi = WifiService(config)

# Create API (which contains the FastAPI app)
api = NexusAPI(coordinator, wifi, config)

# Expose the FastAPI app for uvicorn
app = api.app

# Lifespan events for proper initialization and cleanup
@app.on_event("startup")
async def startup_event():
    """Initialize the device store on startup"""
    logger.info("Starting up application...")
    await store.initialize()
    logger.info("Device store initialized")

@app.on_event("shutdown")
async def shutdown_event():
    """Release the radio and storage on shutdown"""
    logger.info("Shutting down application...")
    await coordinator.release_radio()
    await store.close()
    logger.info("Application shut down complete")

logger.info("ASGI app ready for uvicorn")
