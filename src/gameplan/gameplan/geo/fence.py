from __future__ import annotations

from ..core.enums import FenceStatus, PermissionStatus
from ..core.exceptions import LocationUnavailableError
from ..logging_config import get_logger
from .distance import distance
from .model import FenceCheck, GeoLocation, GeofenceConfig
from .provider import LocationProvider

logger = get_logger(__name__)


def is_within_fence(current_location: GeoLocation, fence: GeofenceConfig) -> bool:
    return distance(current_location, fence.center) <= fence.radius_meters


def check_fence(provider: LocationProvider, fence: GeofenceConfig) -> FenceCheck:
    """Ask the device for its location and evaluate it against the fence.

    Never reports IN_RANGE when permission is denied or the provider fails.
    """
    if provider.request_permission() != PermissionStatus.GRANTED:
        logger.info("Location permission denied")
        return FenceCheck(status=FenceStatus.PERMISSION_DENIED)

    try:
        current = provider.get_current_location()
    except LocationUnavailableError as e:
        logger.warning("Location unavailable: %s", e)
        return FenceCheck(status=FenceStatus.LOCATION_UNAVAILABLE)

    meters = distance(current, fence.center)
    if meters != meters:
        return FenceCheck(status=FenceStatus.LOCATION_UNAVAILABLE, location=current)

    status = FenceStatus.IN_RANGE if meters <= fence.radius_meters else FenceStatus.OUT_OF_RANGE
    return FenceCheck(status=status, distance_meters=meters, location=current)
