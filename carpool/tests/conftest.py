"""
Pytest configuration and shared fixtures for carpool tests.
"""
import asyncio
from typing import Dict, List, Optional, Tuple

import pytest

from carpool.errors import RoutingProviderError
from carpool.models.geo import DetourQuote, GeoCoordinate, PlaceDetails, PlaceSuggestion
from carpool.models.matching import CandidateUser, Role, ScheduleEntry
from carpool.services.routing_provider import RoutingProvider
from carpool.services.schedule_repository import InMemoryScheduleRepository


MAIN_CAMPUS = GeoCoordinate(lat=49.2606, lng=-123.2460)
REQUESTER_HOME = GeoCoordinate(lat=49.30, lng=-123.10)


# ============================================================
# FACTORIES
# ============================================================

def make_user(
    user_id: str,
    role: Role = Role.DRIVER,
    campus: str = "Main Campus",
    home: Optional[GeoCoordinate] = None,
    name: Optional[str] = None,
) -> CandidateUser:
    return CandidateUser(
        id=user_id,
        name=name or f"User {user_id}",
        campus=campus,
        home_area="Kitsilano",
        home=home,
        role=role,
    )


def make_entry(
    owner_user_id: str,
    day_of_week: int = 1,
    to_campus_minutes: int = 510,
    go_home_minutes: int = 1020,
    max_detour: int = 10,
    enabled: bool = True,
) -> ScheduleEntry:
    return ScheduleEntry(
        id=f"{owner_user_id}-{day_of_week}",
        owner_user_id=owner_user_id,
        day_of_week=day_of_week,
        to_campus_minutes=to_campus_minutes,
        go_home_minutes=go_home_minutes,
        to_campus_max_detour_minutes=max_detour,
        go_home_max_detour_minutes=max_detour,
        enabled=enabled,
    )


# ============================================================
# FAKE ROUTING PROVIDER
# ============================================================

class FakeRoutingProvider(RoutingProvider):
    """
    Returns a preset extra-detour value per driver origin and records calls.

    ``fail_for`` holds driver origins whose lookup raises RoutingProviderError.
    """

    name = "fake"

    def __init__(self, extras: Optional[Dict[Tuple[float, float], int]] = None, delay: float = 0.0):
        self.extras = extras or {}
        self.delay = delay
        self.fail_for: set = set()
        self.calls: List[Tuple[GeoCoordinate, GeoCoordinate, GeoCoordinate]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def autocomplete(self, query: str, limit: int = 5) -> List[PlaceSuggestion]:
        return [PlaceSuggestion(place_id="fake-1", label=f"{query} Street")][:limit]

    async def place_details(self, place_id: str) -> PlaceDetails:
        return PlaceDetails(place_id=place_id, label="Fake", address="1 Fake St", lat=49.0, lng=-123.0)

    async def route_duration_minutes(self, origin: GeoCoordinate, dest: GeoCoordinate) -> int:
        return 12

    async def detour_extra_minutes(self, driver_origin, passenger_stop, destination) -> DetourQuote:
        self.calls.append((driver_origin, passenger_stop, destination))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            key = (driver_origin.lat, driver_origin.lng)
            if key in self.fail_for:
                raise RoutingProviderError("upstream exploded", {"origin": key})
            extra = self.extras.get(key, 0)
            return DetourQuote.from_durations(20, 20 + extra)
        finally:
            self.in_flight -= 1


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def fake_provider() -> FakeRoutingProvider:
    return FakeRoutingProvider()


@pytest.fixture
def repository() -> InMemoryScheduleRepository:
    """Requester plus a driver inside the window and one outside it."""
    repo = InMemoryScheduleRepository()
    repo.add_user(make_user("requester", role=Role.PASSENGER, home=REQUESTER_HOME))
    repo.add_user(make_user("driver-near", home=GeoCoordinate(lat=49.29, lng=-123.12)))
    repo.add_user(make_user("driver-late", home=GeoCoordinate(lat=49.28, lng=-123.13)))
    repo.add_schedules([
        make_entry("requester", to_campus_minutes=510),
        make_entry("driver-near", to_campus_minutes=520, max_detour=30),
        make_entry("driver-late", to_campus_minutes=600, max_detour=30),
    ])
    return repo
