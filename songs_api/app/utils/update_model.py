"""Partial updates of stored records."""

from typing import Any, Dict, Mapping


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


# Marks a patch value as not provided; such keys are skipped.
MISSING: Any = _Missing()


def update_model(original: Mapping[str, Any], patch: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``original`` with the values of ``patch`` applied.

    Values that are ``MISSING`` or an empty string are ignored.  ``None``
    is applied, so a field can be cleared explicitly.  ``original`` is
    left untouched.

    >>> update_model({"a": 1, "b": 2}, {"b": 3})
    {'a': 1, 'b': 3}
    >>> update_model({"a": 1}, {"a": None})
    {'a': None}
    """
    updated = dict(original)
    for key, value in patch.items():
        if value is MISSING or (isinstance(value, str) and value == ""):
            continue
        updated[key] = value
    return updated
