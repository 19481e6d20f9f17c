"""
SpeciesBoard Backend — Shared Input Checks
==========================================

Presence checks used by both services before any SQL runs. Missing or
empty values become ValidationError (→ 400) naming the offending field.
"""

from typing import Optional

from speciesboard.exceptions import ValidationError


def require(value: Optional[str], field: str, label: str) -> str:
    """Returns `value` or raises ValidationError when it is missing or empty."""
    if not value:
        raise ValidationError(message=f"{label} is required", field=field)
    return value
