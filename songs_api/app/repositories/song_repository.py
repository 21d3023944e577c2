"""Data access for the ``songs`` collection."""

from typing import Any, Dict, Optional

from .base import MongoRepository


class SongRepository(MongoRepository):
    """Songs keyed by ObjectId, unique by exact ``title``."""

    unique_fields = ("title",)

    async def get_by_title(self, title: str) -> Optional[Dict[str, Any]]:
        return await self.find_one(title=title)
