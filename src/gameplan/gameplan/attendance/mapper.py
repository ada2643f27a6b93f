"""Calendar display mapping for attendance records."""

from __future__ import annotations

from typing import Mapping

from ..core.constants import CALENDAR_SELECTED_COLOR


def to_calendar_display(attendance_map: Mapping[str, Mapping]) -> dict[str, dict]:
    """Turn raw ``date -> {marked, ...}`` data into calendar display entries.

    Unmarked dates are left out. The input is never mutated, and mapping an
    already mapped result returns the same result.
    """
    display: dict[str, dict] = {}
    for day, entry in attendance_map.items():
        marked = bool((entry or {}).get("marked", False))
        if not marked:
            continue
        display[day] = {"marked": True, "selected": True, "selectedColor": CALENDAR_SELECTED_COLOR}
    return display
