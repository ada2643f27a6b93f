from __future__ import annotations

import copy
import re
from typing import Mapping

from ..core.exceptions import ValidationError

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def deep_merge(base: Mapping, updates: Mapping) -> dict:
    """Merge ``updates`` into a copy of ``base``; nested mappings merge key by key."""
    merged = copy.deepcopy(dict(base))
    for key, value in updates.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def require_field_name(field: str) -> str:
    if not _FIELD_RE.match(field or ""):
        raise ValidationError(f"Invalid document field: {field!r}")
    return field
