"""Tests for application assembly."""
from __future__ import annotations

from fastapi.testclient import TestClient

from songs_api.app.main import create_app


class TestCreateApp:
    def test_lifespan_connects_and_closes_database(self, settings, database):
        app = create_app(settings, database=database)
        assert database.connected is False
        with TestClient(app):
            assert database.connected is True
        assert database.connected is False

    def test_state_holds_injected_objects(self, settings, database):
        app = create_app(settings, database=database)
        assert app.state.settings is settings
        assert app.state.database is database

    def test_routes_are_mounted_under_api(self, client):
        assert client.get("/api/songs/all").status_code == 200
        assert client.get("/songs/all").status_code == 404
