"""
Commute matching engine.

Finds counterparts whose schedule for a weekday falls inside a requester's
time window and, when the requester's home location is known, keeps only
those whose detour to pick the requester up stays within the counterpart's own
max-detour budget.

Ranking:
- full path: ascending extra detour minutes, ties by time difference
- degraded path (no requester home): ascending time difference only
"""

import logging
from typing import List, Optional, Sequence

from carpool.campus_registry import CampusRegistry, campus_registry
from carpool.errors import (
    DriverNotFound,
    DriverUnavailable,
    InvalidDayOfWeek,
    UserNotFound,
)
from carpool.models.geo import GeoCoordinate
from carpool.models.matching import (
    CandidateRow,
    DetourMatch,
    Direction,
    DriverAvailability,
    MatchResponse,
    MatchScore,
    RoleGroup,
    TimeMatch,
)
from carpool.services.batch_executor import map_with_concurrency
from carpool.services.routing_provider import RoutingProvider
from carpool.services.schedule_repository import ScheduleRepository
from carpool.time_utils import format_time_of_day, parse_time_of_day

logger = logging.getLogger(__name__)

GEO_SKIPPED_NOTE = "Geo filtering skipped: requester home location missing."
DEFAULT_CONCURRENCY = 5


class MatchEngine:
    """Orchestrates candidate lookup, scoring and detour filtering."""

    def __init__(
        self,
        repository: ScheduleRepository,
        routing_provider: RoutingProvider,
        campuses: Optional[CampusRegistry] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.repository = repository
        self.routing_provider = routing_provider
        self.campuses = campuses or campus_registry
        self.concurrency = concurrency

    async def find_matches(
        self,
        requester_id: str,
        day_of_week: int,
        direction: Direction,
        target_time: str,
        flexibility_minutes: int,
        target_role_group: RoleGroup,
    ) -> MatchResponse:
        """
        Rank counterparts for one commute leg.

        Raises:
            InvalidTimeFormat: ``target_time`` is not HH:MM.
            UserNotFound: requester id unknown.
            UnknownCampus: requester's campus is not registered.
            RoutingProviderError: any detour lookup failed; the whole call aborts.
        """
        target_minutes = parse_time_of_day(target_time)

        requester = await self.repository.get_requester(requester_id)
        if requester is None:
            raise UserNotFound(requester_id)

        campus_coords = self.campuses.resolve(requester.campus)

        time_field = direction.time_field
        time_range = (target_minutes - flexibility_minutes, target_minutes + flexibility_minutes)

        rows = await self.repository.find_candidates(
            day_of_week=day_of_week,
            campus=requester.campus,
            exclude_user_id=requester_id,
            role_in=target_role_group.roles(),
            time_field=time_field,
            time_range=time_range,
        )
        logger.info(
            f"[Match] requester={requester_id} day={day_of_week} {direction.value} "
            f"{target_time}±{flexibility_minutes} -> {len(rows)} candidates"
        )

        scored = [self._score(row, direction, target_minutes) for row in rows]

        if requester.home is None:
            scored.sort(key=lambda m: m.time_difference_minutes)
            return MatchResponse(results=scored, degraded_note=GEO_SKIPPED_NOTE)

        detoured = await self._apply_detour_filter(scored, requester.home, campus_coords, direction)
        detoured.sort(key=lambda m: (m.extra_detour_minutes, m.time_difference_minutes))
        return MatchResponse(results=detoured)

    async def find_drivers_to_campus(self, requester_id: str, day_of_week: int, target_time: str,
                                     flexibility_minutes: int = 15) -> MatchResponse:
        return await self.find_matches(requester_id, day_of_week, Direction.TO_CAMPUS, target_time,
                                       flexibility_minutes, RoleGroup.DRIVER)

    async def find_drivers_go_home(self, requester_id: str, day_of_week: int, target_time: str,
                                   flexibility_minutes: int = 15) -> MatchResponse:
        return await self.find_matches(requester_id, day_of_week, Direction.GO_HOME, target_time,
                                       flexibility_minutes, RoleGroup.DRIVER)

    async def find_passengers_to_campus(self, requester_id: str, day_of_week: int, target_time: str,
                                        flexibility_minutes: int = 15) -> MatchResponse:
        return await self.find_matches(requester_id, day_of_week, Direction.TO_CAMPUS, target_time,
                                       flexibility_minutes, RoleGroup.PASSENGER)

    async def find_passengers_go_home(self, requester_id: str, day_of_week: int, target_time: str,
                                      flexibility_minutes: int = 15) -> MatchResponse:
        return await self.find_matches(requester_id, day_of_week, Direction.GO_HOME, target_time,
                                       flexibility_minutes, RoleGroup.PASSENGER)

    async def get_availability(self, driver_id: str, day_of_week: int) -> DriverAvailability:
        """
        Driver profile plus the enabled schedule entry for one weekday.

        DriverNotFound and DriverUnavailable are the two distinct "not found"
        outcomes (unknown/inactive/non-driver vs. no entry that day).
        """
        if isinstance(day_of_week, bool) or not isinstance(day_of_week, int) or not 0 <= day_of_week <= 6:
            raise InvalidDayOfWeek(day_of_week)

        driver = await self.repository.get_active_driver(driver_id)
        if driver is None:
            raise DriverNotFound(driver_id)

        entry = await self.repository.get_enabled_schedule(driver_id, day_of_week)
        if entry is None:
            raise DriverUnavailable(driver_id, day_of_week)

        return DriverAvailability(
            driver=driver,
            schedule=entry,
            to_campus_time=format_time_of_day(entry.to_campus_minutes),
            go_home_time=format_time_of_day(entry.go_home_minutes),
        )

    # ------------------------------------------------------------------

    def _score(self, row: CandidateRow, direction: Direction, target_minutes: int) -> TimeMatch:
        entry = row.schedule
        entry_minutes = entry.minutes_for(direction)
        score = MatchScore(
            time_difference_minutes=abs(entry_minutes - target_minutes),
            field=direction.time_field,
            target_time=format_time_of_day(target_minutes),
            entry_time=format_time_of_day(entry_minutes),
            to_campus_time=format_time_of_day(entry.to_campus_minutes),
            go_home_time=format_time_of_day(entry.go_home_minutes),
        )
        return TimeMatch(candidate=row.user, schedule=entry, score=score)

    async def _apply_detour_filter(
        self,
        matches: Sequence[TimeMatch],
        requester_home: GeoCoordinate,
        campus_coords: GeoCoordinate,
        direction: Direction,
    ) -> List[DetourMatch]:
        async def evaluate(match: TimeMatch) -> Optional[DetourMatch]:
            candidate_home = match.candidate.home
            if candidate_home is None:
                return None

            quote = await self.routing_provider.detour_extra_minutes(
                candidate_home, requester_home, campus_coords
            )
            if quote.extra_minutes > match.schedule.max_detour_for(direction):
                return None

            return DetourMatch(
                candidate=match.candidate,
                schedule=match.schedule,
                score=match.score,
                detour=quote,
            )

        evaluated = await map_with_concurrency(matches, self.concurrency, evaluate)
        kept = [m for m in evaluated if m is not None]
        logger.info(f"[Match] detour filter kept {len(kept)}/{len(matches)}")
        return kept
