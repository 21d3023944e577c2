"""
Field validators.

Every validator returns a ``ValidationResult`` instead of raising, so
handlers can collect the messages of several fields and answer with a
single 422.
"""

import re
from datetime import datetime
from typing import Any, NamedTuple, Optional

BLOCKED_EMAIL_DOMAINS = frozenset({"yahoo.com", "netscape.net", "river.org"})

EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9._%+\-]+@[A-Za-z0-9](?:[A-Za-z0-9\-]*[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9\-]*[A-Za-z0-9])?)*\.[A-Za-z]{2,}$"
)

MIN_YEAR = 1

EMPTY_FIELD_MESSAGE = "El campo no puede estar vacío"
INVALID_EMAIL_MESSAGE = "Formato de email inválido."
VALID_EMAIL_MESSAGE = "Email válido."
INVALID_YEAR_MESSAGE = "El año de lanzamiento tiene un formato incorrecto"
VALID_YEAR_MESSAGE = "Año válido."


class ValidationResult(NamedTuple):
    valid: bool
    message: str


def validate(value: Any) -> ValidationResult:
    """Check that a required field is present and not blank."""
    if value is None:
        return ValidationResult(False, EMPTY_FIELD_MESSAGE)
    if isinstance(value, str) and not value.strip():
        return ValidationResult(False, EMPTY_FIELD_MESSAGE)
    return ValidationResult(True, "ok")


def validate_email(value: Any) -> ValidationResult:
    """Check email format, then reject blocked providers."""
    if not isinstance(value, str) or not EMAIL_PATTERN.match(value.strip()):
        return ValidationResult(False, INVALID_EMAIL_MESSAGE)
    domain = value.strip().rsplit("@", 1)[1].lower()
    if domain in BLOCKED_EMAIL_DOMAINS:
        return ValidationResult(False, f"No se permiten cuentas de {domain}.")
    return ValidationResult(True, VALID_EMAIL_MESSAGE)


def coerce_year(value: Any) -> Optional[int]:
    """Return ``value`` as an int year, or ``None`` if it is not one.

    Accepts ints, floats with no fractional part and strings holding
    an integer of at most six digits.  Booleans are rejected even though
    they are ints.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if re.fullmatch(r"[+-]?\d{1,6}", text):
            return int(text)
    return None


def validate_year(value: Any) -> ValidationResult:
    """Check a release year is an integer between 1 and next year."""
    year = coerce_year(value)
    if year is None or not MIN_YEAR <= year <= datetime.now().year + 1:
        return ValidationResult(False, INVALID_YEAR_MESSAGE)
    return ValidationResult(True, VALID_YEAR_MESSAGE)
