"""
Routing provider backed by the Google Maps web services.

Endpoints used (all GET, JSON):
- place/autocomplete   address entry suggestions
- place/details        place id -> coordinates
- distancematrix       single origin/destination duration
- directions           duration fallback and waypoint (detour) routes

Duration and detour answers are memoized for a few minutes; place lookups are
not. Any HTTP, JSON or provider-status failure raises RoutingProviderError,
the only recovery being the Distance Matrix -> Directions retry for plain
durations.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from carpool.errors import PlaceNotFound, RoutingProviderError
from carpool.models.geo import DetourQuote, GeoCoordinate, PlaceDetails, PlaceSuggestion
from carpool.services.routing_provider import RoutingProvider, seconds_to_minutes
from carpool.services.ttl_cache import TTLCache
from carpool.type_defs import LocationString

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://maps.googleapis.com/maps/api"
DEFAULT_CACHE_TTL_SECONDS = 5 * 60

Location = Union[GeoCoordinate, PlaceSuggestion, PlaceDetails, str]


def format_location(location: Location) -> LocationString:
    """GeoCoordinate -> "lat,lng"; place objects -> "place_id:<id>"; str passes through."""
    if isinstance(location, GeoCoordinate):
        return location.as_location()
    if isinstance(location, (PlaceSuggestion, PlaceDetails)):
        return f"place_id:{location.place_id}"
    if isinstance(location, str) and location:
        return location
    raise RoutingProviderError("Unsupported location input", {"input": repr(location)})


def _duration_seconds(node: Any) -> Optional[float]:
    if not isinstance(node, dict):
        return None
    value = node.get("value")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


class GoogleRoutingProvider(RoutingProvider):
    """Google Maps routing with TTL caching and Distance Matrix fallback."""

    name = "google"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 10.0,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not api_key:
            raise ValueError("GoogleRoutingProvider requires GOOGLE_MAPS_API_KEY")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.duration_cache: TTLCache[int] = TTLCache(cache_ttl_seconds)
        self.detour_cache: TTLCache[DetourQuote] = TTLCache(cache_ttl_seconds)
        self._http_client = client
        self._owns_client = client is None
        self._stats = {"requests": 0, "cache_hits": 0, "fallbacks": 0, "errors": 0}

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout_seconds,
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            )
            self._owns_client = True
        return self._http_client

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def autocomplete(self, query: str, limit: int = 5) -> List[PlaceSuggestion]:
        normalized = (query or "").strip()
        if not normalized:
            return []

        data = await self._fetch_json("place/autocomplete", {"input": normalized})
        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            raise RoutingProviderError(
                "Places Autocomplete returned non-OK status",
                {"status": status, "error_message": data.get("error_message")},
            )

        predictions = data.get("predictions")
        if not isinstance(predictions, list):
            predictions = []
        return [
            PlaceSuggestion(place_id=p["place_id"], label=p.get("description", ""))
            for p in predictions[:max(1, limit)]
            if isinstance(p, dict) and p.get("place_id")
        ]

    async def place_details(self, place_id: str) -> PlaceDetails:
        data = await self._fetch_json(
            "place/details",
            {"place_id": place_id, "fields": "place_id,name,formatted_address,geometry"},
        )
        status = data.get("status")
        if status in ("NOT_FOUND", "INVALID_REQUEST"):
            raise PlaceNotFound(place_id)
        if status != "OK":
            raise RoutingProviderError(
                "Place Details returned non-OK status",
                {"status": status, "error_message": data.get("error_message")},
            )

        result = data.get("result") or {}
        location = (result.get("geometry") or {}).get("location") or {}
        if not isinstance(location.get("lat"), (int, float)) or not isinstance(location.get("lng"), (int, float)):
            raise RoutingProviderError("Place Details missing geometry", {"result": result})

        return PlaceDetails(
            place_id=result.get("place_id", place_id),
            label=result.get("name", ""),
            address=result.get("formatted_address", ""),
            lat=location["lat"],
            lng=location["lng"],
        )

    async def route_duration_minutes(self, origin: GeoCoordinate, dest: GeoCoordinate) -> int:
        return await self.duration(origin, dest)

    async def detour_extra_minutes(
        self,
        driver_origin: GeoCoordinate,
        passenger_stop: GeoCoordinate,
        destination: GeoCoordinate,
    ) -> DetourQuote:
        return await self.detour(driver_origin, passenger_stop, destination)

    # ------------------------------------------------------------------
    # Cached lookups
    # ------------------------------------------------------------------

    async def duration(self, origin: Location, destination: Location) -> int:
        o = format_location(origin)
        d = format_location(destination)
        cache_key = f"dur|{o}|{d}"
        cached = self.duration_cache.get(cache_key)
        if cached is not None:
            self._stats["cache_hits"] += 1
            return cached

        try:
            minutes = await self._duration_via_distance_matrix(o, d)
        except RoutingProviderError as e:
            self._stats["fallbacks"] += 1
            logger.warning(f"[Geo] Distance Matrix failed ({e}), retrying via Directions")
            minutes = await self._duration_via_directions(o, d)

        self.duration_cache.set(cache_key, minutes)
        return minutes

    async def detour(
        self,
        driver_origin: Location,
        passenger_stop: Location,
        destination: Location,
    ) -> DetourQuote:
        o = format_location(driver_origin)
        w = format_location(passenger_stop)
        d = format_location(destination)
        cache_key = f"detour|{o}|{w}|{d}"
        cached = self.detour_cache.get(cache_key)
        if cached is not None:
            self._stats["cache_hits"] += 1
            return cached

        base_minutes = await self._duration_via_directions(o, d)
        via_minutes = await self._duration_with_waypoint_via_directions(o, w, d)
        quote = DetourQuote.from_durations(base_minutes, via_minutes)

        logger.debug(
            f"[Geo] Detour {o} -> {w} -> {d}: base={base_minutes}min "
            f"via={via_minutes}min extra={quote.extra_minutes}min"
        )
        self.detour_cache.set(cache_key, quote)
        return quote

    # ------------------------------------------------------------------
    # Upstream calls
    # ------------------------------------------------------------------

    async def _duration_via_distance_matrix(self, origin: str, destination: str) -> int:
        data = await self._fetch_json(
            "distancematrix",
            {"origins": origin, "destinations": destination, "mode": "driving"},
        )
        if data.get("status") != "OK":
            raise RoutingProviderError(
                "Distance Matrix API returned non-OK status",
                {"status": data.get("status"), "error_message": data.get("error_message")},
            )

        rows = data.get("rows") or [{}]
        elements = (rows[0] or {}).get("elements") or [{}]
        element = elements[0] or {}
        if element.get("status") != "OK":
            raise RoutingProviderError(
                "Distance Matrix element non-OK",
                {"element_status": element.get("status")},
            )

        seconds = _duration_seconds(element.get("duration_in_traffic"))
        if seconds is None:
            seconds = _duration_seconds(element.get("duration"))
        if seconds is None:
            raise RoutingProviderError("Distance Matrix missing duration value", {"element": element})
        return seconds_to_minutes(seconds)

    async def _duration_via_directions(self, origin: str, destination: str) -> int:
        legs = await self._directions_legs(origin, destination)
        seconds = _duration_seconds(legs[0].get("duration")) if legs else None
        if seconds is None:
            raise RoutingProviderError("Directions missing duration", {"legs": legs})
        return seconds_to_minutes(seconds)

    async def _duration_with_waypoint_via_directions(
        self, origin: str, waypoint: str, destination: str
    ) -> int:
        # Literal origin -> waypoint -> destination order: the driver picks the
        # passenger up and then continues to the destination.
        legs = await self._directions_legs(origin, destination, waypoint=waypoint)
        if len(legs) < 2:
            raise RoutingProviderError("Directions waypoint route missing legs", {"legs": legs})

        first = _duration_seconds(legs[0].get("duration"))
        second = _duration_seconds(legs[1].get("duration"))
        if first is None or second is None:
            raise RoutingProviderError("Directions waypoint legs missing duration", {"legs": legs})
        return seconds_to_minutes(first + second)

    async def _directions_legs(
        self, origin: str, destination: str, waypoint: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        params = {"origin": origin, "destination": destination}
        if waypoint is not None:
            params["waypoints"] = waypoint

        data = await self._fetch_json("directions", params)
        if data.get("status") != "OK":
            raise RoutingProviderError(
                "Directions API returned non-OK status",
                {"status": data.get("status"), "error_message": data.get("error_message")},
            )

        routes = data.get("routes") or [{}]
        legs = (routes[0] or {}).get("legs")
        if not isinstance(legs, list):
            return []
        return [leg if isinstance(leg, dict) else {} for leg in legs]

    async def _fetch_json(self, endpoint: str, params: Dict[str, str]) -> Dict[str, Any]:
        url = f"{self.base_url}/{endpoint}/json"
        self._stats["requests"] += 1
        client = await self._get_client()

        try:
            response = await client.get(
                url,
                params={**params, "key": self.api_key},
                headers={"Accept": "application/json"},
            )
        except httpx.TimeoutException as e:
            self._stats["errors"] += 1
            logger.warning(f"[Geo] Timeout calling {endpoint}")
            raise RoutingProviderError("Google API request timed out", {"endpoint": endpoint}) from e
        except httpx.HTTPError as e:
            self._stats["errors"] += 1
            logger.error(f"[Geo] Error calling {endpoint}: {e}")
            raise RoutingProviderError(
                "Google API request failed", {"endpoint": endpoint, "error": str(e)}
            ) from e

        text = response.text
        try:
            data = json.loads(text) if text else {}
        except ValueError as e:
            self._stats["errors"] += 1
            raise RoutingProviderError(
                "Google API returned non-JSON response",
                {"http_status": response.status_code, "body_snippet": text[:200]},
            ) from e

        if not response.is_success:
            self._stats["errors"] += 1
            raise RoutingProviderError(
                "Google API HTTP error",
                {"http_status": response.status_code, "body": data},
            )

        if not isinstance(data, dict):
            self._stats["errors"] += 1
            raise RoutingProviderError(
                "Google API returned unexpected JSON", {"body_snippet": text[:200]}
            )
        return data

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def get_stats(self) -> Dict[str, int]:
        return self._stats.copy()

    def clear_cache(self) -> None:
        self.duration_cache.clear()
        self.detour_cache.clear()
        logger.info("[Geo] Cache cleared")

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None and not self._http_client.is_closed:
            await self._http_client.aclose()
