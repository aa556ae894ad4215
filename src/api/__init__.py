"""
API module for Wi-Fi and Bluetooth management
"""

from .main_api import NexusAPI
from .bluetooth_routes import create_bluetooth_routes
from .wifi_routes import create_wifi_routes
from .system_routes import create_system_routes

__all__ = ['NexusAPI', 'create_bluetooth_routes', 'create_wifi_routes', 'create_system_routes']
