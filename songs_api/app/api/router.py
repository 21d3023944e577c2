"""
Top-level API router.

Aggregates the domain routers under their prefixes.  ``create_app``
mounts this router under ``/api``.
"""

from fastapi import APIRouter

from .endpoints import songs, users

router = APIRouter()

router.include_router(songs.router, prefix="/songs", tags=["songs"])
router.include_router(users.router, prefix="/users", tags=["users"])
