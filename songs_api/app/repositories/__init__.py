"""
Data access layer.

One repository per collection.  Repositories speak MongoDB through
``motor`` and hand plain dictionaries back to the services.
"""

from .base import MongoRepository, from_document, to_document, to_object_id
from .song_repository import SongRepository
from .user_repository import UserRepository

__all__ = [
    "MongoRepository",
    "SongRepository",
    "UserRepository",
    "from_document",
    "to_document",
    "to_object_id",
]
