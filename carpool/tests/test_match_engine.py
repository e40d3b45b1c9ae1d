"""
Tests for MatchEngine: time filtering, degraded mode, detour filtering and ranking.
"""
from unittest.mock import AsyncMock

import pytest

from carpool.errors import (
    DriverNotFound,
    DriverUnavailable,
    InvalidDayOfWeek,
    InvalidTimeFormat,
    RoutingProviderError,
    UnknownCampus,
    UserNotFound,
)
from carpool.models.geo import GeoCoordinate
from carpool.models.matching import DetourMatch, Direction, RequesterProfile, Role, RoleGroup, TimeMatch
from carpool.services.estimator_provider import EstimatorRoutingProvider
from carpool.services.match_engine import GEO_SKIPPED_NOTE, MatchEngine
from carpool.services.schedule_repository import InMemoryScheduleRepository
from carpool.tests.conftest import (
    MAIN_CAMPUS,
    REQUESTER_HOME,
    FakeRoutingProvider,
    make_entry,
    make_user,
)


def home(i: int) -> GeoCoordinate:
    return GeoCoordinate(lat=49.20 + i / 100, lng=-123.10)


def build_repo(requester_home=REQUESTER_HOME, requester_campus="Main Campus") -> InMemoryScheduleRepository:
    repo = InMemoryScheduleRepository()
    repo.add_user(make_user("req", role=Role.PASSENGER, home=requester_home, campus=requester_campus))
    repo.add_schedule(make_entry("req"))
    return repo


async def drivers_to_campus(engine: MatchEngine, time: str = "08:30", flex: int = 15, day: int = 1):
    return await engine.find_matches("req", day, Direction.TO_CAMPUS, time, flex, RoleGroup.DRIVER)


# ============================================================
# END-TO-END
# ============================================================

@pytest.mark.asyncio
async def test_main_campus_scenario_with_estimator(repository):
    engine = MatchEngine(repository, EstimatorRoutingProvider())

    response = await engine.find_matches(
        requester_id="requester",
        day_of_week=1,
        direction=Direction.TO_CAMPUS,
        target_time="08:30",
        flexibility_minutes=15,
        target_role_group=RoleGroup.DRIVER,
    )

    assert not response.degraded
    assert [m.candidate.id for m in response.results] == ["driver-near"]
    match = response.results[0]
    assert isinstance(match, DetourMatch)
    assert match.time_difference_minutes == 10
    assert match.extra_detour_minutes >= 0
    assert match.score.target_time == "08:30"
    assert match.score.entry_time == "08:40"
    assert match.score.go_home_time == "17:00"


@pytest.mark.asyncio
async def test_detour_called_with_candidate_home_requester_home_campus(repository, fake_provider):
    engine = MatchEngine(repository, fake_provider)

    await engine.find_drivers_to_campus("requester", 1, "08:30")

    assert fake_provider.calls == [(GeoCoordinate(lat=49.29, lng=-123.12), REQUESTER_HOME, MAIN_CAMPUS)]


# ============================================================
# TIME WINDOW AND CANDIDATE FILTERS
# ============================================================

@pytest.mark.asyncio
async def test_window_bounds_are_inclusive():
    repo = build_repo(requester_home=None)
    for i, minutes in enumerate([494, 495, 510, 525, 526]):
        repo.add_user(make_user(f"d{i}"))
        repo.add_schedule(make_entry(f"d{i}", to_campus_minutes=minutes))
    engine = MatchEngine(repo, FakeRoutingProvider())

    response = await drivers_to_campus(engine)

    assert sorted(m.schedule.to_campus_minutes for m in response.results) == [495, 510, 525]


@pytest.mark.asyncio
async def test_zero_flexibility_exact_match_only():
    repo = build_repo(requester_home=None)
    repo.add_user(make_user("exact"))
    repo.add_schedule(make_entry("exact", to_campus_minutes=510))
    repo.add_user(make_user("off"))
    repo.add_schedule(make_entry("off", to_campus_minutes=511))
    engine = MatchEngine(repo, FakeRoutingProvider())

    response = await drivers_to_campus(engine, flex=0)

    assert [m.candidate.id for m in response.results] == ["exact"]


@pytest.mark.asyncio
async def test_filters_role_day_campus_enabled_and_active():
    repo = build_repo(requester_home=None)
    repo.add_user(make_user("driver"))
    repo.add_user(make_user("both", role=Role.BOTH))
    repo.add_user(make_user("passenger", role=Role.PASSENGER))
    repo.add_user(make_user("other-campus", campus="North Campus"))
    repo.add_user(make_user("disabled"))
    repo.add_user(make_user("inactive"), is_active=False)
    repo.add_user(make_user("other-day"))
    repo.add_schedules([
        make_entry("driver"),
        make_entry("both"),
        make_entry("passenger"),
        make_entry("other-campus"),
        make_entry("disabled", enabled=False),
        make_entry("inactive"),
        make_entry("other-day", day_of_week=2),
    ])
    engine = MatchEngine(repo, FakeRoutingProvider())

    response = await drivers_to_campus(engine)

    assert sorted(m.candidate.id for m in response.results) == ["both", "driver"]


@pytest.mark.asyncio
async def test_requester_never_matches_self():
    repo = InMemoryScheduleRepository()
    repo.add_user(make_user("req", role=Role.BOTH))
    repo.add_schedule(make_entry("req"))
    engine = MatchEngine(repo, FakeRoutingProvider())

    response = await drivers_to_campus(engine)

    assert response.results == []


@pytest.mark.asyncio
async def test_passenger_group_includes_both_role():
    repo = build_repo(requester_home=None)
    repo.add_user(make_user("p1", role=Role.PASSENGER))
    repo.add_user(make_user("b1", role=Role.BOTH))
    repo.add_user(make_user("d1", role=Role.DRIVER))
    repo.add_schedules([make_entry("p1"), make_entry("b1"), make_entry("d1")])
    engine = MatchEngine(repo, FakeRoutingProvider())

    response = await engine.find_passengers_to_campus("req", 1, "08:30")

    # the requester is a PASSENGER too but is excluded as self
    assert sorted(m.candidate.id for m in response.results) == ["b1", "p1"]


@pytest.mark.asyncio
async def test_go_home_uses_go_home_time_and_budget():
    repo = build_repo()
    repo.add_user(make_user("evening", home=home(1)))
    repo.add_schedule(make_entry("evening", to_campus_minutes=420, go_home_minutes=1030))
    repo.entries[-1] = repo.entries[-1].model_copy(update={
        "to_campus_max_detour_minutes": 0,
        "go_home_max_detour_minutes": 8,
    })
    provider = FakeRoutingProvider({(home(1).lat, home(1).lng): 8})
    engine = MatchEngine(repo, provider)

    response = await engine.find_drivers_go_home("req", 1, "17:00")

    assert [m.candidate.id for m in response.results] == ["evening"]
    assert response.results[0].score.field == "go_home"
    assert response.results[0].time_difference_minutes == 10


# ============================================================
# DEGRADED PATH
# ============================================================

@pytest.mark.asyncio
async def test_degraded_when_requester_has_no_home():
    repo = build_repo(requester_home=None)
    repo.add_user(make_user("far", home=None))
    repo.add_user(make_user("close", home=home(1)))
    repo.add_schedules([
        make_entry("far", to_campus_minutes=500),
        make_entry("close", to_campus_minutes=512),
    ])
    provider = FakeRoutingProvider()
    engine = MatchEngine(repo, provider)

    response = await drivers_to_campus(engine)

    assert response.degraded
    assert response.degraded_note == GEO_SKIPPED_NOTE
    assert [m.candidate.id for m in response.results] == ["close", "far"]
    assert all(isinstance(m, TimeMatch) for m in response.results)
    assert provider.calls == []


@pytest.mark.asyncio
async def test_degraded_results_serialize_without_detour():
    repo = build_repo(requester_home=None)
    repo.add_user(make_user("d"))
    repo.add_schedule(make_entry("d"))
    engine = MatchEngine(repo, FakeRoutingProvider())

    response = await drivers_to_campus(engine)
    payload = response.model_dump(mode="json")

    assert payload["results"][0]["kind"] == "time"
    assert "detour" not in payload["results"][0]


# ============================================================
# FULL PATH
# ============================================================

@pytest.mark.asyncio
async def test_sorted_by_extra_then_time_difference():
    repo = build_repo()
    # (id, to_campus_minutes, extra detour)
    rows = [("a", 512, 6), ("b", 520, 2), ("c", 509, 2), ("d", 500, 0)]
    extras = {}
    for i, (user_id, minutes, extra) in enumerate(rows):
        repo.add_user(make_user(user_id, home=home(i)))
        repo.add_schedule(make_entry(user_id, to_campus_minutes=minutes))
        extras[(home(i).lat, home(i).lng)] = extra
    engine = MatchEngine(repo, FakeRoutingProvider(extras))

    response = await drivers_to_campus(engine)

    assert [m.candidate.id for m in response.results] == ["d", "c", "b", "a"]
    assert [m.extra_detour_minutes for m in response.results] == [0, 2, 2, 6]
    assert response.degraded_note is None


@pytest.mark.asyncio
async def test_budget_is_inclusive_and_per_candidate():
    repo = build_repo()
    repo.add_user(make_user("at-budget", home=home(1)))
    repo.add_user(make_user("over-budget", home=home(2)))
    repo.add_user(make_user("big-budget", home=home(3)))
    repo.add_schedules([
        make_entry("at-budget", max_detour=10),
        make_entry("over-budget", max_detour=10),
        make_entry("big-budget", max_detour=30),
    ])
    extras = {(home(1).lat, home(1).lng): 10, (home(2).lat, home(2).lng): 11, (home(3).lat, home(3).lng): 25}
    engine = MatchEngine(repo, FakeRoutingProvider(extras))

    response = await drivers_to_campus(engine)

    assert [m.candidate.id for m in response.results] == ["at-budget", "big-budget"]


@pytest.mark.asyncio
async def test_candidates_without_home_dropped_in_full_path():
    repo = build_repo()
    repo.add_user(make_user("no-home", home=None))
    repo.add_user(make_user("has-home", home=home(1)))
    repo.add_schedules([make_entry("no-home", to_campus_minutes=510), make_entry("has-home", to_campus_minutes=520)])
    provider = FakeRoutingProvider()
    engine = MatchEngine(repo, provider)

    response = await drivers_to_campus(engine)

    assert [m.candidate.id for m in response.results] == ["has-home"]
    assert len(provider.calls) == 1


@pytest.mark.asyncio
async def test_provider_failure_aborts_match():
    repo = build_repo()
    repo.add_user(make_user("ok", home=home(1)))
    repo.add_user(make_user("broken", home=home(2)))
    repo.add_schedules([make_entry("ok"), make_entry("broken")])
    provider = FakeRoutingProvider()
    provider.fail_for.add((home(2).lat, home(2).lng))
    engine = MatchEngine(repo, provider)

    with pytest.raises(RoutingProviderError):
        await drivers_to_campus(engine)


@pytest.mark.asyncio
async def test_at_most_five_detour_lookups_in_flight():
    repo = build_repo()
    for i in range(13):
        repo.add_user(make_user(f"d{i}", home=home(i)))
        repo.add_schedule(make_entry(f"d{i}", to_campus_minutes=500 + i))
    provider = FakeRoutingProvider(delay=0.005)
    engine = MatchEngine(repo, provider)

    response = await drivers_to_campus(engine)

    assert len(response.results) == 13
    assert len(provider.calls) == 13
    assert provider.max_in_flight == 5


def test_concurrency_must_be_positive(repository, fake_provider):
    with pytest.raises(ValueError):
        MatchEngine(repository, fake_provider, concurrency=0)


# ============================================================
# ERRORS
# ============================================================

@pytest.mark.asyncio
async def test_unknown_requester(repository, fake_provider):
    engine = MatchEngine(repository, fake_provider)
    with pytest.raises(UserNotFound):
        await engine.find_drivers_to_campus("ghost", 1, "08:30")


@pytest.mark.asyncio
async def test_unknown_campus_lists_allowed():
    repo = build_repo(requester_campus="Nowhere U")
    engine = MatchEngine(repo, FakeRoutingProvider())

    with pytest.raises(UnknownCampus) as exc_info:
        await drivers_to_campus(engine)

    assert len(exc_info.value.allowed) == 3
    assert "Main Campus" in exc_info.value.allowed


@pytest.mark.asyncio
async def test_invalid_target_time(repository, fake_provider):
    engine = MatchEngine(repository, fake_provider)
    with pytest.raises(InvalidTimeFormat):
        await engine.find_drivers_to_campus("requester", 1, "8:30am")


# ============================================================
# AVAILABILITY
# ============================================================

class TestAvailability:

    @pytest.fixture
    def engine(self) -> MatchEngine:
        repo = InMemoryScheduleRepository()
        repo.add_user(make_user("driver"))
        repo.add_user(make_user("both", role=Role.BOTH))
        repo.add_user(make_user("rider", role=Role.PASSENGER))
        repo.add_user(make_user("retired"), is_active=False)
        repo.add_schedules([
            make_entry("driver", day_of_week=3, to_campus_minutes=485, go_home_minutes=1050),
            make_entry("driver", day_of_week=4, enabled=False),
            make_entry("both", day_of_week=3),
            make_entry("rider", day_of_week=3),
            make_entry("retired", day_of_week=3),
        ])
        return MatchEngine(repo, FakeRoutingProvider())

    @pytest.mark.asyncio
    async def test_returns_formatted_times(self, engine):
        availability = await engine.get_availability("driver", 3)

        assert availability.driver.id == "driver"
        assert availability.to_campus_time == "08:05"
        assert availability.go_home_time == "17:30"
        assert availability.schedule.day_of_week == 3

    @pytest.mark.asyncio
    async def test_both_role_counts_as_driver(self, engine):
        availability = await engine.get_availability("both", 3)
        assert availability.driver.role == Role.BOTH

    @pytest.mark.asyncio
    @pytest.mark.parametrize("driver_id", ["ghost", "rider", "retired"])
    async def test_driver_not_found(self, engine, driver_id):
        with pytest.raises(DriverNotFound):
            await engine.get_availability(driver_id, 3)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("day", [0, 4])
    async def test_no_enabled_entry_that_day(self, engine, day):
        with pytest.raises(DriverUnavailable):
            await engine.get_availability("driver", day)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("day", [-1, 7, True])
    async def test_invalid_day(self, engine, day):
        with pytest.raises(InvalidDayOfWeek):
            await engine.get_availability("driver", day)


@pytest.mark.asyncio
async def test_repository_query_built_from_request():
    repo = AsyncMock()
    repo.get_requester.return_value = RequesterProfile(id="req", campus="North Campus", home_area="")
    repo.find_candidates.return_value = []
    engine = MatchEngine(repo, FakeRoutingProvider())

    response = await engine.find_matches("req", 5, Direction.GO_HOME, "16:45", 20, RoleGroup.PASSENGER)

    repo.find_candidates.assert_awaited_once_with(
        day_of_week=5,
        campus="North Campus",
        exclude_user_id="req",
        role_in=[Role.PASSENGER, Role.BOTH],
        time_field="go_home",
        time_range=(985, 1025),
    )
    assert response.results == []
    assert response.degraded
