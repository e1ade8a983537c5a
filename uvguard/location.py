"""Seam between the geolocation provider and the data-access layer."""

from dataclasses import dataclass

from pydantic import ValidationError

from uvguard.errors import InvalidArgument, LocationPermissionDenied
from uvguard.models import Coordinate


@dataclass(frozen=True)
class LocationFix:
    """What the platform geolocation provider hands over."""
    latitude: float
    longitude: float
    granted: bool = True


def resolve_coordinate(fix: LocationFix) -> Coordinate:
    """Turn a provider fix into a validated Coordinate.

    A denied permission is surfaced as an input error rather than retried.
    """
    if not fix.granted:
        raise LocationPermissionDenied("Permission to access location was denied")
    try:
        return Coordinate(latitude=fix.latitude, longitude=fix.longitude)
    except ValidationError as exc:
        raise InvalidArgument("Invalid coordinates provided") from exc
