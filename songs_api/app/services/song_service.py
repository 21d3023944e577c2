"""
Business logic for songs.

``SongService`` validates incoming payloads, enforces title uniqueness
and ownership rules, and talks to the ``SongRepository`` of the
injected database handle.  Failures are raised as ``AppError``
subclasses and rendered by the exception handlers.

The songs-by-author report is computed in Python by
``build_author_report`` over the full list of songs.
"""

import logging
import math
from typing import Any, Dict, Iterable, List

from ..core.errors import ConflictError, DuplicateRecordError, ForbiddenError, NotFoundError, ValidationError
from ..schemas.song import AuthorReport, SongCreate, SongRead, SongUpdate
from ..utils.update_model import update_model
from ..utils.validators import coerce_year, validate, validate_year

logger = logging.getLogger(__name__)

INVALID_FIELDS_MESSAGE = "Completar los campos correctamente"
UNCATEGORIZED = "Sin Categoría"
EDITABLE_FIELDS = ("title", "author", "release_year", "language", "category")


def _title_conflict(title: str) -> ConflictError:
    return ConflictError(f'La canción con el título "{title}" ya existe.')


def build_author_report(songs: Iterable[Dict[str, Any]]) -> Dict[str, AuthorReport]:
    """Group songs by author and compute per-author statistics.

    Songs without an author are skipped.  Author and category names are
    stripped; a song without a category counts as ``"Sin Categoría"``.
    The average release year is the floor of the mean over songs with a
    numeric, finite, non-zero year (``None`` when there are none).  The most
    frequent category is the first one reaching the highest count.
    """
    grouped: Dict[str, Dict[str, Any]] = {}
    for song in songs:
        author = song.get("author")
        if not isinstance(author, str) or not author.strip():
            continue
        category = song.get("category")
        category_name = category.strip() if isinstance(category, str) and category.strip() else UNCATEGORIZED
        entry = grouped.setdefault(author.strip(), {"total": 0, "years": [], "categories": {}})
        entry["total"] += 1
        year = song.get("release_year")
        if isinstance(year, (int, float)) and not isinstance(year, bool) and year and math.isfinite(year):
            entry["years"].append(year)
        entry["categories"][category_name] = entry["categories"].get(category_name, 0) + 1

    report: Dict[str, AuthorReport] = {}
    for author, entry in grouped.items():
        years: List[float] = entry["years"]
        categories: Dict[str, int] = entry["categories"]
        report[author] = AuthorReport(
            total_songs=entry["total"],
            average_release_year=math.floor(sum(years) / len(years)) if years else None,
            # max() keeps the first maximal key in insertion order
            most_frequent_category=max(categories, key=categories.get) if categories else "N/A",
            categories=categories,
        )
    return report


class SongService:
    """Song operations bound to one database handle."""

    def __init__(self, database) -> None:
        self.songs = database.songs

    async def list_songs(self) -> List[SongRead]:
        return [SongRead.model_validate(song) for song in await self.songs.get_all()]

    async def get_song(self, song_id: str) -> SongRead:
        song = await self.songs.get_by_id(song_id)
        if song is None:
            raise NotFoundError("Cancion no encontrada", key="error")
        return SongRead.model_validate(song)

    async def create_song(self, data: SongCreate, current_user: Dict[str, Any]) -> SongRead:
        """Validate and store a new song owned by ``current_user``.

        All four required fields are reported back, valid or not, so the
        client can show one message per input.
        """
        results = {
            "title": validate(data.title),
            "author": validate(data.author),
            "release_year": validate_year(data.release_year),
            "category": validate(data.category),
        }
        if not all(result.valid for result in results.values()):
            raise ValidationError(
                INVALID_FIELDS_MESSAGE,
                errors={field: result.message for field, result in results.items()},
            )

        if await self.songs.get_by_title(data.title) is not None:
            raise _title_conflict(data.title)

        try:
            song = await self.songs.create(
                {
                    "title": data.title,
                    "author": data.author,
                    "release_year": coerce_year(data.release_year),
                    "language": data.language,
                    "category": data.category,
                    "createdBy": current_user.get("id"),
                    "duration": 0,
                }
            )
        except DuplicateRecordError:
            # Lost a race with a concurrent create of the same title.
            raise _title_conflict(data.title)
        logger.info("Song %s created by %s", song["id"], current_user.get("id"))
        return SongRead.model_validate(song)

    async def update_song(self, data: SongUpdate, current_user: Dict[str, Any]) -> SongRead:
        """Apply a partial update to a song.

        Only the creator of the song or an administrator may update it.
        Fields that are absent or empty strings are left unchanged; every
        field that will be written is validated first.
        """
        if not data.id:
            raise ValidationError("El id es obligatorio para actualizar la cancion")

        changes = update_model({}, data.model_dump(exclude_unset=True, exclude={"id"}))
        errors = {}
        for field in ("title", "author", "category"):
            if field in changes:
                result = validate(changes[field])
                if not result.valid:
                    errors[field] = result.message
        if "release_year" in changes:
            result = validate_year(changes["release_year"])
            if not result.valid:
                errors["release_year"] = result.message
            else:
                changes["release_year"] = coerce_year(changes["release_year"])
        if errors:
            raise ValidationError(INVALID_FIELDS_MESSAGE, errors=errors)

        song = await self.songs.get_by_id(data.id)
        if song is None:
            raise NotFoundError("Canción no encontrada")

        if song.get("createdBy") != current_user.get("id") and current_user.get("role") != "admin":
            logger.warning("User %s may not update song %s", current_user.get("id"), song["id"])
            raise ForbiddenError("No tienes permisos para actualizar esta canción")

        new_title = changes.get("title", song["title"])
        if new_title != song["title"]:
            existing = await self.songs.get_by_title(new_title)
            if existing is not None and existing["id"] != song["id"]:
                raise _title_conflict(new_title)

        merged = update_model(song, {field: changes[field] for field in EDITABLE_FIELDS if field in changes})
        merged["duration"] = song.get("duration", 0)
        try:
            updated = await self.songs.update(song["id"], merged)
        except DuplicateRecordError:
            raise _title_conflict(new_title)
        if updated is None:
            raise NotFoundError("Canción no encontrada")
        logger.info("Song %s updated by %s", song["id"], current_user.get("id"))
        return SongRead.model_validate(updated)

    async def delete_song(self, song_id: str) -> str:
        """Delete a song and return its title."""
        song = await self.songs.get_by_id(song_id)
        if song is None:
            raise NotFoundError("La cancion no existe", key="error")
        await self.songs.delete(song["id"])
        logger.info("Song %s deleted", song["id"])
        return song["title"]

    async def report_by_author(self) -> Dict[str, AuthorReport]:
        songs = await self.songs.get_all()
        if not songs:
            raise NotFoundError("No hay canciones disponibles.", ok=False)
        return build_author_report(songs)
