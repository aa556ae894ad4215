"""
PostgreSQL device store backend
"""

import logging
from typing import Dict, List, Optional

import asyncpg

from discovery.errors import PersistenceError

from .models import SavedDevice
from .store import DeviceStore

logger = logging.getLogger(__name__)


class PostgresDeviceStore(DeviceStore):
    """Saved devices kept in a PostgreSQL table keyed by address"""

    def __init__(self, config: Dict):
        self.pool: Optional[asyncpg.Pool] = None
        self.db_host = config['host']
        self.db_port = config['port']
        self.db_name = config['database']
        self.db_user = config['username']
        self.db_password = config['password']

    async def initialize(self):
        """Initialize database connection pool and schema"""
        try:
            self.pool = await asyncpg.create_pool(
                host=self.db_host,
                port=self.db_port,
                database=self.db_name,
                user=self.db_user,
                password=self.db_password,
                min_size=1,
                max_size=5,
                command_timeout=10
            )
            logger.info("Database connection pool created")

            await self.create_schema()
            logger.info("Database schema initialized")

        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise PersistenceError(f"Database initialization failed: {e}") from e

    async def create_schema(self):
        schema_sql = """
        CREATE TABLE IF NOT EXISTS saved_devices (
            address TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
        );
        """
        async with self.pool.acquire() as conn:
            await conn.execute(schema_sql)

    async def close(self):
        if self.pool:
            await self.pool.close()
            logger.info("Database connection pool closed")

    async def load(self) -> List[SavedDevice]:
        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch("""
                    SELECT address, name FROM saved_devices ORDER BY created_at, address
                """)
        except Exception as e:
            logger.error(f"Failed to load saved devices: {e}")
            raise PersistenceError(f"Failed to load saved devices: {e}") from e

        return [SavedDevice(address=row['address'], name=row['name']) for row in rows]

    async def append(self, device: SavedDevice) -> bool:
        try:
            async with self.pool.acquire() as conn:
                result = await conn.execute("""
                    INSERT INTO saved_devices (address, name) VALUES ($1, $2)
                    ON CONFLICT (address) DO NOTHING
                """, device.address, device.name)
        except Exception as e:
            logger.error(f"Failed to save device {device.address}: {e}")
            raise PersistenceError(f"Failed to save device {device.address}: {e}") from e

        # asyncpg returns the command tag, e.g. "INSERT 0 1"
        added = bool(result) and result.split()[-1] == "1"
        if added:
            logger.info(f"Saved device {device.name} [{device.address}]")
        return added

    async def exists(self, address: str) -> bool:
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchval(
                    "SELECT 1 FROM saved_devices WHERE address = $1", address.upper()
                )
        except Exception as e:
            logger.error(f"Failed to look up device {address}: {e}")
            raise PersistenceError(f"Failed to look up device {address}: {e}") from e
        return row is not None
