"""
Pydantic models for song data.

Request fields are deliberately loose (everything optional, the year
untyped) so that the service validators, not pydantic, decide what is
acceptable and produce the field-level messages clients expect.
``createdBy`` is exposed under its wire name through an alias.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SongCreate(BaseModel):
    """Schema for creating a song."""

    title: Optional[str] = Field(None, examples=["Bohemian Rhapsody"])
    author: Optional[str] = Field(None, examples=["Queen"])
    release_year: Optional[Any] = Field(None, examples=[1975])
    language: Optional[str] = Field(None, examples=["en"])
    category: Optional[str] = Field(None, examples=["Rock"])


class SongUpdate(SongCreate):
    """Schema for updating a song.

    ``id`` names the song.  Only fields present in the body are applied;
    empty strings are ignored and ``null`` clears a field.
    """

    id: Optional[str] = Field(None, examples=["507f1f77bcf86cd799439011"])


class SongRead(BaseModel):
    """Schema for reading a song from the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    author: Optional[str] = None
    release_year: Optional[int] = None
    language: Optional[str] = None
    category: Optional[str] = None
    created_by: Optional[str] = Field(None, alias="createdBy")
    duration: float = 0


class SongListResponse(BaseModel):
    message: str
    payload: List[SongRead]


class SongResponse(BaseModel):
    message: str
    payload: SongRead


class SongMutationPayload(BaseModel):
    message: str
    song: SongRead


class SongMutationResponse(BaseModel):
    ok: bool = True
    payload: SongMutationPayload


class AuthorReport(BaseModel):
    """Statistics for one author in the songs-by-author report."""

    model_config = ConfigDict(populate_by_name=True)

    total_songs: int = Field(alias="totalSongs")
    average_release_year: Optional[int] = Field(None, alias="averageReleaseYear")
    most_frequent_category: str = Field("N/A", alias="mostFrequentCategory")
    categories: Dict[str, int] = Field(default_factory=dict)


class AuthorReportResponse(BaseModel):
    ok: bool = True
    reporte: Dict[str, AuthorReport]
