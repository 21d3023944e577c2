"""Pure helpers shared by the services: field validators and record merging."""

from .update_model import MISSING, update_model
from .validators import ValidationResult, coerce_year, validate, validate_email, validate_year

__all__ = [
    "MISSING",
    "ValidationResult",
    "coerce_year",
    "update_model",
    "validate",
    "validate_email",
    "validate_year",
]
