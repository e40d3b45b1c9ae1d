"""
SQLAlchemy-backed schedule repository.

Queries run on synchronous sessions inside worker threads so they do not
block the event loop.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session, contains_eager, sessionmaker

from carpool.models.geo import GeoCoordinate
from carpool.models.matching import (
    CandidateRow,
    CandidateUser,
    RequesterProfile,
    Role,
    ScheduleEntry,
)
from carpool.services.schedule_repository import DRIVER_ROLES, ScheduleRepository
from carpool.type_defs import DayOfWeek, TimeField, TimeRange

from .database import session_scope
from .models import ScheduleEntryModel, UserModel

logger = logging.getLogger(__name__)

_TIME_COLUMNS = {
    "to_campus": ScheduleEntryModel.to_campus_mins,
    "go_home": ScheduleEntryModel.go_home_mins,
}


def _home(user: UserModel) -> Optional[GeoCoordinate]:
    if user.home_lat is None or user.home_lng is None:
        return None
    return GeoCoordinate(lat=user.home_lat, lng=user.home_lng)


def to_candidate_user(user: UserModel) -> CandidateUser:
    return CandidateUser(
        id=user.id,
        name=user.name,
        photo_url=user.photo_url,
        campus=user.campus,
        home_area=user.home_area or "",
        home=_home(user),
        role=Role(user.role),
        time_zone=user.time_zone,
    )


def to_schedule_entry(entry: ScheduleEntryModel) -> ScheduleEntry:
    return ScheduleEntry(
        id=entry.id,
        owner_user_id=entry.user_id,
        day_of_week=entry.day_of_week,
        to_campus_minutes=entry.to_campus_mins,
        go_home_minutes=entry.go_home_mins,
        to_campus_flex_minutes=entry.to_campus_flex_min,
        go_home_flex_minutes=entry.go_home_flex_min,
        to_campus_max_detour_minutes=entry.to_campus_max_detour_mins,
        go_home_max_detour_minutes=entry.go_home_max_detour_mins,
        enabled=entry.enabled,
    )


class SqlScheduleRepository(ScheduleRepository):
    """ScheduleRepository over the ``users`` and ``schedule_entries`` tables."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def get_requester(self, user_id: str) -> Optional[RequesterProfile]:
        return await asyncio.to_thread(self._get_requester, user_id)

    async def find_candidates(
        self,
        day_of_week: DayOfWeek,
        campus: str,
        exclude_user_id: str,
        role_in: Sequence[Role],
        time_field: TimeField,
        time_range: TimeRange,
    ) -> List[CandidateRow]:
        return await asyncio.to_thread(
            self._find_candidates, day_of_week, campus, exclude_user_id,
            [r.value for r in role_in], time_field, time_range,
        )

    async def get_active_driver(self, driver_id: str) -> Optional[CandidateUser]:
        return await asyncio.to_thread(self._get_active_driver, driver_id)

    async def get_enabled_schedule(self, user_id: str, day_of_week: DayOfWeek) -> Optional[ScheduleEntry]:
        return await asyncio.to_thread(self._get_enabled_schedule, user_id, day_of_week)

    # ------------------------------------------------------------------

    def _get_requester(self, user_id: str) -> Optional[RequesterProfile]:
        with session_scope(self.session_factory) as db:
            user = db.query(UserModel).filter(UserModel.id == user_id).first()
            if user is None:
                return None
            return RequesterProfile(
                id=user.id,
                campus=user.campus,
                home_area=user.home_area or "",
                home=_home(user),
            )

    def _find_candidates(
        self,
        day_of_week: int,
        campus: str,
        exclude_user_id: str,
        roles: List[str],
        time_field: TimeField,
        time_range: TimeRange,
    ) -> List[CandidateRow]:
        column = _TIME_COLUMNS[time_field]
        low, high = time_range
        with session_scope(self.session_factory) as db:
            entries = (
                self._candidate_query(db)
                .filter(
                    ScheduleEntryModel.day_of_week == day_of_week,
                    ScheduleEntryModel.enabled.is_(True),
                    UserModel.is_active.is_(True),
                    UserModel.campus == campus,
                    UserModel.role.in_(roles),
                    UserModel.id != exclude_user_id,
                    column >= low,
                    column <= high,
                )
                .order_by(column.asc())
                .all()
            )
            rows = [
                CandidateRow(user=to_candidate_user(entry.user), schedule=to_schedule_entry(entry))
                for entry in entries
            ]
        logger.debug(f"[DB] {len(rows)} candidates for day={day_of_week} campus={campus}")
        return rows

    @staticmethod
    def _candidate_query(db: Session):
        return (
            db.query(ScheduleEntryModel)
            .join(UserModel, ScheduleEntryModel.user_id == UserModel.id)
            .options(contains_eager(ScheduleEntryModel.user))
        )

    def _get_active_driver(self, driver_id: str) -> Optional[CandidateUser]:
        with session_scope(self.session_factory) as db:
            user = (
                db.query(UserModel)
                .filter(
                    UserModel.id == driver_id,
                    UserModel.is_active.is_(True),
                    UserModel.role.in_([r.value for r in DRIVER_ROLES]),
                )
                .first()
            )
            return to_candidate_user(user) if user is not None else None

    def _get_enabled_schedule(self, user_id: str, day_of_week: int) -> Optional[ScheduleEntry]:
        with session_scope(self.session_factory) as db:
            entry = (
                db.query(ScheduleEntryModel)
                .filter(
                    ScheduleEntryModel.user_id == user_id,
                    ScheduleEntryModel.day_of_week == day_of_week,
                    ScheduleEntryModel.enabled.is_(True),
                )
                .first()
            )
            return to_schedule_entry(entry) if entry is not None else None
