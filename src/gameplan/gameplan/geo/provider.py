from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from ..core.enums import PermissionStatus
from ..core.exceptions import LocationUnavailableError
from .model import GeoLocation


class LocationProvider(Protocol):
    """Device location services.

    get_current_location raises LocationUnavailableError when the platform
    cannot produce a fix.
    """

    def request_permission(self) -> PermissionStatus:
        raise NotImplementedError

    def get_current_location(self) -> GeoLocation:
        raise NotImplementedError


@dataclass(frozen=True)
class ReportedLocationProvider(LocationProvider):
    """Location reported by the client device along with its request."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    permission: PermissionStatus = PermissionStatus.GRANTED

    @classmethod
    def from_payload(cls, payload: dict) -> "ReportedLocationProvider":
        raw_permission = str(payload.get("permission") or PermissionStatus.GRANTED.value).lower()
        try:
            permission = PermissionStatus(raw_permission)
        except ValueError:
            permission = PermissionStatus.DENIED

        def _coord(key: str) -> Optional[float]:
            value = payload.get(key)
            if value is None or value == "":
                return None
            try:
                return float(value)
            except (TypeError, ValueError):
                return None

        return cls(latitude=_coord("latitude"), longitude=_coord("longitude"), permission=permission)

    def request_permission(self) -> PermissionStatus:
        return self.permission

    def get_current_location(self) -> GeoLocation:
        if self.latitude is None or self.longitude is None:
            raise LocationUnavailableError("Device location is unavailable")
        if self.latitude != self.latitude or self.longitude != self.longitude:
            raise LocationUnavailableError("Device reported an invalid location")
        return GeoLocation(latitude=self.latitude, longitude=self.longitude)
