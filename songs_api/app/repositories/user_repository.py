"""Data access for the ``users`` collection.

Records returned here include the stored password hash; the service
layer is responsible for never serialising it.
"""

from typing import Any, Dict, Optional

from .base import MongoRepository


class UserRepository(MongoRepository):
    """Users keyed by ObjectId, unique by ``email``."""

    unique_fields = ("email",)

    async def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return await self.find_one(email=email)
