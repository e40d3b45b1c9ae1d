"""
CRUD operations for the carpool database.

Seeding helpers for the schedule tables: create users and upsert their
weekday entries (one per user and weekday). Used to load data before serving
with USE_DATABASE=true and by the SQL repository tests.

Matching itself only reads through carpool.db.repository.
"""

import logging
from typing import List, Sequence

from sqlalchemy.orm import Session, joinedload

from . import models, schemas

logger = logging.getLogger(__name__)


# =============================================================================
# User CRUD
# =============================================================================

def create_user(db: Session, user_data: schemas.UserCreate) -> models.UserModel:
    """
    Create a new user.

    Args:
        db: Database session
        user_data: Profile fields

    Returns:
        Created UserModel instance
    """
    kwargs = dict(
        name=user_data.name,
        photo_url=user_data.photo_url,
        campus=user_data.campus,
        home_area=user_data.home_area,
        home_lat=user_data.home_lat,
        home_lng=user_data.home_lng,
        role=user_data.role.value,
        time_zone=user_data.time_zone,
        is_active=user_data.is_active,
    )
    if user_data.id:
        kwargs["id"] = user_data.id
    db_user = models.UserModel(**kwargs)

    db.add(db_user)
    db.commit()
    db.refresh(db_user)

    logger.info(f"[DB] Created user {db_user.id} ({db_user.role})")
    return db_user


# =============================================================================
# Schedule CRUD
# =============================================================================

def upsert_schedule_entry(
    db: Session,
    user_id: str,
    entry_data: schemas.ScheduleEntryUpsert,
) -> models.ScheduleEntryModel:
    """
    Create or replace the entry for (user_id, day_of_week).

    A user owns at most one entry per weekday.
    """
    db_entry = (
        db.query(models.ScheduleEntryModel)
        .filter(
            models.ScheduleEntryModel.user_id == user_id,
            models.ScheduleEntryModel.day_of_week == entry_data.day_of_week,
        )
        .first()
    )
    if db_entry is None:
        db_entry = models.ScheduleEntryModel(user_id=user_id, day_of_week=entry_data.day_of_week)
        db.add(db_entry)

    db_entry.to_campus_mins = entry_data.to_campus_mins
    db_entry.go_home_mins = entry_data.go_home_mins
    db_entry.to_campus_flex_min = entry_data.to_campus_flex_min
    db_entry.go_home_flex_min = entry_data.go_home_flex_min
    db_entry.to_campus_max_detour_mins = entry_data.to_campus_max_detour_mins
    db_entry.go_home_max_detour_mins = entry_data.go_home_max_detour_mins
    db_entry.enabled = entry_data.enabled

    db.commit()
    db.refresh(db_entry)
    logger.debug(f"[DB] Upserted schedule user={user_id} day={entry_data.day_of_week}")
    return db_entry


def upsert_week(
    db: Session,
    user_id: str,
    entries: Sequence[schemas.ScheduleEntryUpsert],
) -> List[models.ScheduleEntryModel]:
    return [upsert_schedule_entry(db, user_id, entry) for entry in entries]


def get_schedule_entries(db: Session, user_id: str) -> List[models.ScheduleEntryModel]:
    return (
        db.query(models.ScheduleEntryModel)
        .options(joinedload(models.ScheduleEntryModel.user))
        .filter(models.ScheduleEntryModel.user_id == user_id)
        .order_by(models.ScheduleEntryModel.day_of_week)
        .all()
    )
