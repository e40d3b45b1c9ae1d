"""
Routing provider interface.

A routing provider answers travel-time questions for the match engine and
place lookups for address entry. Implementations:

- ``EstimatorRoutingProvider``: haversine distance at an assumed speed, no network.
- ``GoogleRoutingProvider``: Google Maps web services with response caching.
"""

import math
from abc import ABC, abstractmethod
from typing import List

from carpool.models.geo import DetourQuote, GeoCoordinate, PlaceDetails, PlaceSuggestion

EARTH_RADIUS_KM = 6371.0


def haversine_distance_km(a: GeoCoordinate, b: GeoCoordinate) -> float:
    """Great-circle distance between two coordinates in km."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = math.radians(b.lat - a.lat)
    dlng = math.radians(b.lng - a.lng)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def seconds_to_minutes(seconds: float) -> int:
    """Upstream seconds -> whole minutes, rounded up, never negative."""
    return max(0, math.ceil(seconds / 60))


class RoutingProvider(ABC):
    """Async travel-time and place lookup capability."""

    name: str = "abstract"

    @abstractmethod
    async def autocomplete(self, query: str, limit: int = 5) -> List[PlaceSuggestion]:
        """At most ``limit`` suggestions; blank query returns []."""

    @abstractmethod
    async def place_details(self, place_id: str) -> PlaceDetails:
        """Raises PlaceNotFound for unknown ids."""

    @abstractmethod
    async def route_duration_minutes(self, origin: GeoCoordinate, dest: GeoCoordinate) -> int:
        """One-way driving time, whole minutes rounded up."""

    @abstractmethod
    async def detour_extra_minutes(
        self,
        driver_origin: GeoCoordinate,
        passenger_stop: GeoCoordinate,
        destination: GeoCoordinate,
    ) -> DetourQuote:
        """Direct vs. via-stop driving time for a driver picking up a passenger."""

    async def aclose(self) -> None:
        """Release network resources, if any."""
        return None
