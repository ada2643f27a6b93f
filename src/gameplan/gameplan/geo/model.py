from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import DEFAULT_FENCE_LATITUDE, DEFAULT_FENCE_LONGITUDE, DEFAULT_FENCE_RADIUS_METERS
from ..core.enums import FenceStatus


@dataclass(frozen=True)
class GeoLocation:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class GeofenceConfig:
    """Trainer-controlled fence. Read-only input to the fence check."""

    latitude: float
    longitude: float
    radius_meters: float

    @property
    def center(self) -> GeoLocation:
        return GeoLocation(latitude=self.latitude, longitude=self.longitude)

    def to_document(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude, "radius": self.radius_meters}

    @classmethod
    def from_document(cls, data: Optional[dict]) -> "GeofenceConfig":
        """Build from a stored trainer location, falling back to the default fence."""
        if not data:
            return DEFAULT_FENCE
        try:
            return cls(
                latitude=float(data["latitude"]),
                longitude=float(data["longitude"]),
                radius_meters=float(data.get("radius", DEFAULT_FENCE_RADIUS_METERS)),
            )
        except (KeyError, TypeError, ValueError):
            return DEFAULT_FENCE


DEFAULT_FENCE = GeofenceConfig(
    latitude=DEFAULT_FENCE_LATITUDE,
    longitude=DEFAULT_FENCE_LONGITUDE,
    radius_meters=DEFAULT_FENCE_RADIUS_METERS,
)


@dataclass(frozen=True)
class FenceCheck:
    status: FenceStatus
    distance_meters: Optional[float] = None
    location: Optional[GeoLocation] = None

    @property
    def allowed(self) -> bool:
        return self.status == FenceStatus.IN_RANGE
