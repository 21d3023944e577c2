"""Tests for the PDF export of users."""
from __future__ import annotations

from datetime import datetime

from songs_api.app.schemas.user import UserRead
from songs_api.app.services.user_export import COLUMNS, _latin1, _row, render_users_pdf


def make_read(**fields):
    data = {"id": "507f1f77bcf86cd799439011", "name": "Ana", "lastname": "García", "email": "ana@example.com"}
    data.update(fields)
    return UserRead.model_validate(data)


class TestRenderUsersPdf:
    def test_renders_a_pdf_document(self):
        content = render_users_pdf(
            [make_read(), make_read(name="\u0141ukasz", email="b@example.com", isActive=False)]
        )
        assert content.startswith(b"%PDF-")
        assert content.rstrip().endswith(b"%%EOF")

    def test_empty_list_still_renders(self):
        content = render_users_pdf([], generated_at=datetime(2024, 1, 1, 12, 0))
        assert content.startswith(b"%PDF-")


class TestRows:
    def test_row_matches_columns(self):
        row = _row(make_read(age=30, role="admin"))
        assert len(row) == len(COLUMNS)
        assert row == ["Ana", "García", "ana@example.com", "30", "admin", "Activo"]

    def test_missing_age_and_inactive_user(self):
        row = _row(make_read(isActive=False))
        assert row[3] == "-"
        assert row[5] == "Inactivo"

    def test_text_outside_latin1_is_replaced(self):
        assert _latin1("Zo\u00eb \u2014 \u0141ukasz \u2019") == "Zoë - ?ukasz '"
        assert _latin1(None) == ""
