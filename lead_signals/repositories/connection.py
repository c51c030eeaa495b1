"""
MongoDB Connection Management
Singleton Motor client with connection pooling and lifecycle management.
"""
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError
from typing import Optional
from ..config import settings
from ..utils.observability import logger


class DatabaseManager:
    """
    Singleton MongoDB client manager with async Motor.
    Handles connection lifecycle, pooling, and graceful shutdown.
    """

    _instance: Optional["DatabaseManager"] = None
    _client: Optional[AsyncIOMotorClient] = None
    _database: Optional[AsyncIOMotorDatabase] = None

    def __new__(cls) -> "DatabaseManager":
        """Enforce singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    async def connect(self) -> None:
        """
        Initialize MongoDB connection with configured pool settings.
        Idempotent - safe to call multiple times.
        """
        if self._client:
            try:
                await self._client.admin.command("ping")
                logger.debug("Reusing healthy MongoDB connection")
                return
            except (RuntimeError, PyMongoError):
                logger.warning("Event loop closed or connection lost. Rebuilding client...")
                self._client = None
                self._database = None

        logger.info(
            f"Connecting to MongoDB at {settings.mongodb_uri}",
            extra={
                "database": settings.mongodb_database,
                "max_pool_size": settings.mongodb_max_pool_size,
                "environment": settings.environment
            }
        )
        # tz_aware so throttle and history timestamps compare against aware datetimes
        self._client = AsyncIOMotorClient(
            settings.mongodb_uri,
            maxPoolSize=settings.mongodb_max_pool_size,
            minPoolSize=settings.mongodb_min_pool_size,
            serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
            tz_aware=True,
        )

        self._database = self._client[settings.mongodb_database]

    async def disconnect(self) -> None:
        """
        Close MongoDB connection and cleanup resources.
        Idempotent - safe to call multiple times.
        """
        if self._client is None:
            logger.debug("MongoDB client already disconnected")
            return

        logger.info("Closing MongoDB connection")
        self._client.close()
        self._client = None
        self._database = None
        logger.info("MongoDB connection closed")

    async def ping(self) -> bool:
        """Readiness check; False when not connected or the server is unreachable."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    @property
    def database(self) -> AsyncIOMotorDatabase:
        """
        Get the database instance.
        Raises RuntimeError if not connected.
        """
        if self._database is None:
            raise RuntimeError(
                "Database not connected. Call await db_manager.connect() first."
            )
        return self._database

    async def create_indexes(self) -> None:
        """
        Create all required indexes.
        Should be called during application startup.
        """
        db = self.database

        logger.info("Creating MongoDB indexes")

        # Behavior events: summary recounts and recent-events listing
        await db.behavior_events.create_index(
            [("tenant_id", 1), ("month", 1), ("event_type", 1)],
            name="idx_tenant_month_type"
        )
        await db.behavior_events.create_index(
            [("tenant_id", 1), ("created_at", -1)],
            name="idx_tenant_created"
        )

        # One summary row per tenant-month
        await db.monthly_summaries.create_index(
            [("tenant_id", 1), ("month", 1)],
            name="idx_tenant_month_unique",
            unique=True
        )

        # Throttle entries expire once their window has passed
        await db.alert_throttle.create_index(
            [("tenant_id", 1), ("lead_contact", 1)],
            name="idx_tenant_contact_unique",
            unique=True
        )
        await db.alert_throttle.create_index(
            "expires_at",
            name="idx_throttle_ttl",
            expireAfterSeconds=0
        )

        await db.alert_history.create_index(
            [("tenant_id", 1), ("owner_contact", 1), ("sent_at", -1)],
            name="idx_owner_alerts"
        )

        await db.tenant_alert_configs.create_index(
            "tenant_id",
            name="idx_tenant_config_unique",
            unique=True
        )

        logger.info("MongoDB indexes created successfully")


# Singleton instance
db_manager = DatabaseManager()


async def get_database() -> AsyncIOMotorDatabase:
    """Returns the connected database instance."""
    return db_manager.database
