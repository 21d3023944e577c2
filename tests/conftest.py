"""Shared fixtures: an in-memory database handle injected into the app."""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from songs_api.app.core.config import Settings
from songs_api.app.core.errors import DuplicateRecordError
from songs_api.app.core.security import hash_password, sign_token
from songs_api.app.main import create_app
from songs_api.app.repositories import to_document

DEFAULT_PASSWORD = "secret123"


class InMemoryRepository:
    """Dictionary-backed stand-in for ``MongoRepository``."""

    unique_fields: tuple = ()

    def __init__(self) -> None:
        self.records: Dict[str, Dict[str, Any]] = {}

    def insert(self, data: Dict[str, Any]) -> Dict[str, Any]:
        record = to_document(data)
        self._check_unique(record)
        record["id"] = str(ObjectId())
        self.records[record["id"]] = record
        return dict(record)

    def _check_unique(self, record: Dict[str, Any], ignore_id: Optional[str] = None) -> None:
        for field in self.unique_fields:
            for other_id, other in self.records.items():
                if other_id != ignore_id and field in record and other.get(field) == record[field]:
                    raise DuplicateRecordError(field)

    async def ensure_indexes(self) -> None:
        return None

    async def get_all(self) -> List[Dict[str, Any]]:
        return [dict(record) for record in self.records.values()]

    async def get_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        record = self.records.get(record_id)
        return dict(record) if record is not None else None

    async def find_one(self, **filters: Any) -> Optional[Dict[str, Any]]:
        for record in self.records.values():
            if all(record.get(key) == value for key, value in filters.items()):
                return dict(record)
        return None

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.insert(data)

    async def update(self, record_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if record_id not in self.records:
            return None
        updated = dict(self.records[record_id])
        updated.update(to_document(changes))
        self._check_unique(updated, ignore_id=record_id)
        self.records[record_id] = updated
        return dict(updated)

    async def delete(self, record_id: str) -> bool:
        return self.records.pop(record_id, None) is not None


class InMemorySongRepository(InMemoryRepository):
    unique_fields = ("title",)

    async def get_by_title(self, title: str) -> Optional[Dict[str, Any]]:
        return await self.find_one(title=title)


class InMemoryUserRepository(InMemoryRepository):
    unique_fields = ("email",)

    async def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return await self.find_one(email=email)


class InMemoryDatabase:
    def __init__(self) -> None:
        self.songs = InMemorySongRepository()
        self.users = InMemoryUserRepository()
        self.connected = False

    async def connect(self) -> None:
        self.connected = True

    async def close(self) -> None:
        self.connected = False


@pytest.fixture
def settings() -> Settings:
    return Settings(
        mongodb_uri="mongodb://localhost:27017",
        jwt_secret="test-jwt-secret-key-for-testing-only",
        database_name="test-database",
        log_level="WARNING",
    )


@pytest.fixture
def database() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def client(settings: Settings, database: InMemoryDatabase):
    app = create_app(settings, database=database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(database: InMemoryDatabase) -> Callable[..., Dict[str, Any]]:
    """Insert a user directly into the store and return its record."""

    def _make_user(
        email: str = "ana@example.com",
        name: str = "Ana",
        role: str = "user",
        is_active: bool = True,
        password: str = DEFAULT_PASSWORD,
        age: Optional[int] = 30,
    ) -> Dict[str, Any]:
        return database.users.insert(
            {
                "name": name,
                "lastname": "García",
                "email": email,
                "password": hash_password(password),
                "age": age,
                "role": role,
                "isActive": is_active,
            }
        )

    return _make_user


@pytest.fixture
def make_song(database: InMemoryDatabase) -> Callable[..., Dict[str, Any]]:
    def _make_song(title: str = "Song", created_by: Optional[str] = None, **fields: Any) -> Dict[str, Any]:
        data = {
            "title": title,
            "author": "Author",
            "release_year": 2000,
            "language": "es",
            "category": "Rock",
            "createdBy": created_by,
            "duration": 0,
        }
        data.update(fields)
        return database.songs.insert(data)

    return _make_song


@pytest.fixture
def auth_headers(settings: Settings) -> Callable[[Dict[str, Any]], Dict[str, str]]:
    """Build an Authorization header carrying a token for ``user``."""

    def _auth_headers(user: Dict[str, Any]) -> Dict[str, str]:
        token = sign_token(
            {"id": user["id"], "email": user["email"], "name": user.get("name"), "role": user.get("role", "user")},
            settings.jwt_secret,
        )
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
