"""
Service orchestration for the Net Nexus portal
"""

from .connection_coordinator import ConnectionCoordinator

__all__ = ['ConnectionCoordinator']
