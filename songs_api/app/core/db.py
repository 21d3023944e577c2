"""
MongoDB integration.

``MongoDatabase`` is the data-access handle passed to the application:
it owns the ``motor`` client and exposes one repository per
collection.  It is built explicitly by ``create_app`` (or injected by
the caller) and stored on ``app.state.database``; there is no
module-level connection.

Creating the client does no I/O.  ``connect`` pings the server and
creates the unique indexes the services rely on; ``close`` releases the
connection pool.
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient

from .config import Settings
from ..repositories import SongRepository, UserRepository

logger = logging.getLogger(__name__)


class MongoDatabase:
    """Connection to the songs database."""

    def __init__(self, uri: str, name: str, client: Optional[AsyncIOMotorClient] = None) -> None:
        self.name = name
        self.client = client or AsyncIOMotorClient(
            uri,
            maxPoolSize=10,
            minPoolSize=1,
            serverSelectionTimeoutMS=5000,
            socketTimeoutMS=45000,
        )
        db = self.client[name]
        self.songs = SongRepository(db["songs"])
        self.users = UserRepository(db["users"])

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoDatabase":
        return cls(settings.mongodb_uri, settings.database_name)

    async def connect(self) -> None:
        """Check the server is reachable and create indexes.

        Errors from the driver propagate so that startup fails loudly.
        """
        try:
            await self.client.admin.command("ping")
            await self.users.ensure_indexes()
            await self.songs.ensure_indexes()
        except Exception as exc:
            logger.error("Error connecting to MongoDB: %s", exc)
            raise
        logger.info("Connected to MongoDB database %s", self.name)

    async def close(self) -> None:
        self.client.close()
        logger.info("MongoDB connection closed")
