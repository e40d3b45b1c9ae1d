"""
Deterministic routing provider that needs no network access.

Durations are straight-line (haversine) distance at an assumed average speed
plus a fixed overhead. Places come from a small built-in catalogue around
Vancouver.
"""

import logging
import math
from typing import List, Optional, Sequence

from carpool.errors import PlaceNotFound
from carpool.models.geo import DetourQuote, GeoCoordinate, PlaceDetails, PlaceSuggestion
from carpool.services.routing_provider import RoutingProvider, haversine_distance_km

logger = logging.getLogger(__name__)

DEFAULT_SPEED_KMH = 35.0
DEFAULT_OVERHEAD_MINUTES = 2.0

KNOWN_PLACES: List[PlaceDetails] = [
    PlaceDetails(place_id="ubc-campus", label="University of British Columbia (UBC) Campus",
                 address="2329 West Mall, Vancouver, BC V6T 1Z4, Canada", lat=49.2606, lng=-123.2460),
    PlaceDetails(place_id="ubc-bookstore", label="UBC Bookstore",
                 address="6200 University Blvd, Vancouver, BC V6T 1Z4, Canada", lat=49.2602, lng=-123.2405),
    PlaceDetails(place_id="ubc-aquatic", label="UBC Aquatic Centre",
                 address="6080 Student Union Blvd, Vancouver, BC V6T 1Z1, Canada", lat=49.2667, lng=-123.2485),
    PlaceDetails(place_id="kitsilano", label="Kitsilano Beach",
                 address="1499 Arbutus St, Vancouver, BC V6J 5N2, Canada", lat=49.2744, lng=-123.1545),
    PlaceDetails(place_id="granville-island", label="Granville Island Public Market",
                 address="1689 Johnston St, Vancouver, BC V6H 3R9, Canada", lat=49.2723, lng=-123.1340),
    PlaceDetails(place_id="downtown-waterfront", label="Waterfront Station",
                 address="601 W Cordova St, Vancouver, BC V6B 1G1, Canada", lat=49.2856, lng=-123.1116),
    PlaceDetails(place_id="metrotown", label="Metropolis at Metrotown",
                 address="4700 Kingsway, Burnaby, BC V5H 4N2, Canada", lat=49.2266, lng=-123.0036),
    PlaceDetails(place_id="ubc-hospital", label="UBC Hospital",
                 address="2211 Wesbrook Mall, Vancouver, BC V6T 2B5, Canada", lat=49.2647, lng=-123.2480),
    PlaceDetails(place_id="gas-town", label="Gastown Steam Clock",
                 address="305 Water St, Vancouver, BC V6B 1B9, Canada", lat=49.2844, lng=-123.1087),
    PlaceDetails(place_id="canada-place", label="Canada Place",
                 address="999 Canada Pl, Vancouver, BC V6C 3T4, Canada", lat=49.2888, lng=-123.1114),
]


class EstimatorRoutingProvider(RoutingProvider):
    """Haversine-based travel time estimator."""

    name = "estimator"

    def __init__(
        self,
        speed_kmh: float = DEFAULT_SPEED_KMH,
        overhead_minutes: float = DEFAULT_OVERHEAD_MINUTES,
        places: Optional[Sequence[PlaceDetails]] = None,
    ):
        if speed_kmh <= 0:
            raise ValueError("speed_kmh must be positive")
        self.speed_kmh = speed_kmh
        self.overhead_minutes = overhead_minutes
        self._places: List[PlaceDetails] = list(KNOWN_PLACES if places is None else places)

    def estimate_minutes(self, origin: GeoCoordinate, dest: GeoCoordinate) -> int:
        distance_km = haversine_distance_km(origin, dest)
        minutes = (distance_km / self.speed_kmh) * 60 + self.overhead_minutes
        return max(0, math.ceil(minutes))

    async def autocomplete(self, query: str, limit: int = 5) -> List[PlaceSuggestion]:
        normalized = (query or "").strip().lower()
        if not normalized:
            return []
        hits = [
            place for place in self._places
            if normalized in place.label.lower() or normalized in place.address.lower()
        ]
        return [
            PlaceSuggestion(place_id=place.place_id, label=place.label)
            for place in hits[:max(1, limit)]
        ]

    async def place_details(self, place_id: str) -> PlaceDetails:
        for place in self._places:
            if place.place_id == place_id:
                return place
        raise PlaceNotFound(place_id)

    async def route_duration_minutes(self, origin: GeoCoordinate, dest: GeoCoordinate) -> int:
        return self.estimate_minutes(origin, dest)

    async def detour_extra_minutes(
        self,
        driver_origin: GeoCoordinate,
        passenger_stop: GeoCoordinate,
        destination: GeoCoordinate,
    ) -> DetourQuote:
        base = self.estimate_minutes(driver_origin, destination)
        via = (
            self.estimate_minutes(driver_origin, passenger_stop)
            + self.estimate_minutes(passenger_stop, destination)
        )
        quote = DetourQuote.from_durations(base, via)
        logger.debug(f"[Geo Estimator] base={base}min via={via}min extra={quote.extra_minutes}min")
        return quote
