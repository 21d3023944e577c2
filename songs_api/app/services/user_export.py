"""
PDF export of the user list.

``render_users_pdf`` lays out one landscape A4 report: a title, the
generation date, the number of users and a table with one row per user.
It takes ``UserRead`` models, so password hashes cannot reach the
document.  The built-in Helvetica font only covers latin-1; other
characters are replaced before they are written.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from ..schemas.user import UserRead

REPORT_TITLE = "Listado de usuarios"
COLUMNS = (
    ("Nombre", 45),
    ("Apellido", 45),
    ("Email", 80),
    ("Edad", 20),
    ("Rol", 30),
    ("Estado", 30),
)
_REPLACEMENTS = {
    "\u2013": "-",
    "\u2014": "-",
    "\u2018": "'",
    "\u2019": "'",
    "\u201C": '"',
    "\u201D": '"',
    "\u00A0": " ",
}


def _latin1(value: object) -> str:
    """Normalise ``value`` to text the core fonts can render."""
    text = "" if value is None else str(value)
    for char, replacement in _REPLACEMENTS.items():
        text = text.replace(char, replacement)
    return "".join(ch if ord(ch) < 256 else "?" for ch in text)


def _row(user: UserRead) -> List[str]:
    return [
        _latin1(user.name),
        _latin1(user.lastname),
        _latin1(user.email),
        "-" if user.age is None else str(user.age),
        _latin1(user.role),
        "Activo" if user.is_active else "Inactivo",
    ]


def render_users_pdf(users: Sequence[UserRead], generated_at: Optional[datetime] = None) -> bytes:
    """Render ``users`` as a PDF document and return its bytes."""
    generated_at = generated_at or datetime.now()

    pdf = FPDF(orientation="L", unit="mm", format="A4")
    pdf.set_title(REPORT_TITLE)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    pdf.set_font("Helvetica", "B", 16)
    pdf.cell(0, 10, REPORT_TITLE, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(0, 6, f"Generado: {generated_at:%Y-%m-%d %H:%M}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.cell(0, 6, f"Total de usuarios: {len(users)}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(4)

    pdf.set_font("Helvetica", "B", 10)
    pdf.set_fill_color(230, 233, 245)
    for title, width in COLUMNS:
        pdf.cell(width, 8, title, border=1, fill=True)
    pdf.ln()

    pdf.set_font("Helvetica", "", 9)
    for user in users:
        for (_, width), value in zip(COLUMNS, _row(user)):
            pdf.cell(width, 7, value, border=1)
        pdf.ln()

    return bytes(pdf.output())
