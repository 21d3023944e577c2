"""
Song endpoints.

Listing, lookup and the songs-by-author report are public.  Creating,
updating and deleting songs require a bearer token; updates are further
restricted to the song's creator or an administrator by the service.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from songs_api.app.api.deps import get_song_service
from songs_api.app.core.errors import internal_errors
from songs_api.app.core.security import get_current_user
from songs_api.app.schemas.common import DeletedResponse, MessagePayload
from songs_api.app.schemas.song import (
    AuthorReportResponse,
    SongCreate,
    SongListResponse,
    SongMutationPayload,
    SongMutationResponse,
    SongResponse,
    SongUpdate,
)
from songs_api.app.services.song_service import SongService

router = APIRouter()


@router.get("/all", response_model=SongListResponse)
async def get_all_songs(service: SongService = Depends(get_song_service)) -> SongListResponse:
    """Return every song."""
    with internal_errors("Error al obtener las canciones"):
        songs = await service.list_songs()
    return SongListResponse(message="OK - Lista de canciones:", payload=songs)


@router.get("/song/{song_id}", response_model=SongResponse)
async def get_song(song_id: str, service: SongService = Depends(get_song_service)) -> SongResponse:
    """Return a single song; unknown or malformed ids give a 404."""
    with internal_errors("Error al obtener la cancion"):
        song = await service.get_song(song_id)
    return SongResponse(message="OK", payload=song)


@router.get("/report/songs-by-author", response_model=AuthorReportResponse)
async def get_songs_report_by_author(service: SongService = Depends(get_song_service)) -> AuthorReportResponse:
    """Group songs by author.

    For each author: number of songs, average release year and most
    frequent category.  Answers 404 when there are no songs at all.
    """
    with internal_errors("Error al generar el reporte"):
        report = await service.report_by_author()
    return AuthorReportResponse(reporte=report)


@router.post("/create", response_model=SongMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_song(
    song: SongCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: SongService = Depends(get_song_service),
) -> SongMutationResponse:
    """Create a song owned by the authenticated user.

    Answers 422 with per-field messages when a field is invalid and 409
    when another song already has the same title.
    """
    with internal_errors("Error al crear la canción"):
        created = await service.create_song(song, current_user)
    return SongMutationResponse(
        payload=SongMutationPayload(
            message=f"La canción: {created.title} fue creada exitosamente",
            song=created,
        )
    )


@router.patch("/update", response_model=SongMutationResponse)
async def update_song(
    song: SongUpdate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: SongService = Depends(get_song_service),
) -> SongMutationResponse:
    """Partially update the song named by ``id`` in the body."""
    with internal_errors("Error al actualizar la canción"):
        updated = await service.update_song(song, current_user)
    return SongMutationResponse(
        payload=SongMutationPayload(
            message=f"La canción: {updated.title} fue actualizada exitosamente",
            song=updated,
        )
    )


@router.delete("/delete/{song_id}", response_model=DeletedResponse)
async def delete_song(
    song_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: SongService = Depends(get_song_service),
) -> DeletedResponse:
    with internal_errors("Error al borrar la cancion"):
        title = await service.delete_song(song_id)
    return DeletedResponse(payload=MessagePayload(message=f"La cancion :{title} ha sido borrada con exito"))
