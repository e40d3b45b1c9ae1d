"""
Schedule repository interface used by the match engine, plus an in-memory
implementation for tests and database-less runs.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from carpool.models.matching import (
    CandidateRow,
    CandidateUser,
    RequesterProfile,
    Role,
    ScheduleEntry,
)
from carpool.type_defs import DayOfWeek, TimeField, TimeRange

logger = logging.getLogger(__name__)

DRIVER_ROLES = (Role.DRIVER, Role.BOTH)


class ScheduleRepository(ABC):
    """Read-only access to users and their weekly schedules."""

    @abstractmethod
    async def get_requester(self, user_id: str) -> Optional[RequesterProfile]:
        """Campus and home location of a user, or None if unknown."""

    @abstractmethod
    async def find_candidates(
        self,
        day_of_week: DayOfWeek,
        campus: str,
        exclude_user_id: str,
        role_in: Sequence[Role],
        time_field: TimeField,
        time_range: TimeRange,
    ) -> List[CandidateRow]:
        """
        Enabled entries for ``day_of_week`` owned by active users on ``campus``
        whose role is in ``role_in``, excluding ``exclude_user_id``, with the
        ``time_field`` value inside the inclusive ``time_range``. Ordered by
        that time field ascending.
        """

    @abstractmethod
    async def get_active_driver(self, driver_id: str) -> Optional[CandidateUser]:
        """Active user with role DRIVER or BOTH, or None."""

    @abstractmethod
    async def get_enabled_schedule(self, user_id: str, day_of_week: DayOfWeek) -> Optional[ScheduleEntry]:
        """The enabled entry for that user and day, or None."""


@dataclass
class StoredUser:
    profile: CandidateUser
    is_active: bool = True


def _time_value(entry: ScheduleEntry, time_field: TimeField) -> int:
    return entry.to_campus_minutes if time_field == "to_campus" else entry.go_home_minutes


@dataclass
class InMemoryScheduleRepository(ScheduleRepository):
    """Dictionary-backed repository; keeps insertion order for ties."""

    users: Dict[str, StoredUser] = field(default_factory=dict)
    entries: List[ScheduleEntry] = field(default_factory=list)

    def add_user(self, user: CandidateUser, is_active: bool = True) -> CandidateUser:
        self.users[user.id] = StoredUser(profile=user, is_active=is_active)
        return user

    def add_schedule(self, entry: ScheduleEntry) -> ScheduleEntry:
        # one entry per (owner, day): a new one replaces the old
        self.entries = [
            e for e in self.entries
            if not (e.owner_user_id == entry.owner_user_id and e.day_of_week == entry.day_of_week)
        ]
        self.entries.append(entry)
        return entry

    def add_schedules(self, entries: Iterable[ScheduleEntry]) -> None:
        for entry in entries:
            self.add_schedule(entry)

    async def get_requester(self, user_id: str) -> Optional[RequesterProfile]:
        stored = self.users.get(user_id)
        if stored is None:
            return None
        profile = stored.profile
        return RequesterProfile(
            id=profile.id,
            campus=profile.campus,
            home_area=profile.home_area,
            home=profile.home,
        )

    async def find_candidates(
        self,
        day_of_week: DayOfWeek,
        campus: str,
        exclude_user_id: str,
        role_in: Sequence[Role],
        time_field: TimeField,
        time_range: TimeRange,
    ) -> List[CandidateRow]:
        low, high = time_range
        roles = set(role_in)
        rows: List[CandidateRow] = []
        for entry in self.entries:
            stored = self.users.get(entry.owner_user_id)
            if stored is None or not stored.is_active:
                continue
            user = stored.profile
            if (
                entry.enabled
                and entry.day_of_week == day_of_week
                and user.campus == campus
                and user.role in roles
                and user.id != exclude_user_id
                and low <= _time_value(entry, time_field) <= high
            ):
                rows.append(CandidateRow(user=user, schedule=entry))

        rows.sort(key=lambda row: _time_value(row.schedule, time_field))
        logger.debug(f"[Repo] {len(rows)} candidates for day={day_of_week} campus={campus}")
        return rows

    async def get_active_driver(self, driver_id: str) -> Optional[CandidateUser]:
        stored = self.users.get(driver_id)
        if stored is None or not stored.is_active or stored.profile.role not in DRIVER_ROLES:
            return None
        return stored.profile

    async def get_enabled_schedule(self, user_id: str, day_of_week: DayOfWeek) -> Optional[ScheduleEntry]:
        for entry in self.entries:
            if entry.owner_user_id == user_id and entry.day_of_week == day_of_week and entry.enabled:
                return entry
        return None
