"""Request dependencies that hand services the injected database handle."""

from fastapi import Depends, Request

from ..services.song_service import SongService
from ..services.user_service import UserService


def get_database(request: Request):
    return request.app.state.database


def get_song_service(database=Depends(get_database)) -> SongService:
    return SongService(database)


def get_user_service(request: Request, database=Depends(get_database)) -> UserService:
    return UserService(database, request.app.state.settings)
