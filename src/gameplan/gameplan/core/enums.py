from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role, decides which profile collection a user lives in."""

    TRAINER = "trainer"
    STUDENT = "student"


class PermissionStatus(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"


class FenceStatus(str, Enum):
    """Outcome of a geofence check.

    Permission denial and a missing location are kept apart from
    OUT_OF_RANGE so callers can tell the user what actually went wrong.
    """

    IN_RANGE = "IN_RANGE"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    LOCATION_UNAVAILABLE = "LOCATION_UNAVAILABLE"
