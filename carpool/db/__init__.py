"""
Database module for the carpool service.

SQLAlchemy persistence for users and schedules, exposed to the match engine
through SqlScheduleRepository. Disabled with USE_DATABASE=false.
"""

from .database import (
    create_session_factory,
    create_tables,
    drop_tables,
    init_engine,
    is_database_available,
    session_scope,
)
from .models import Base, ScheduleEntryModel, UserModel
from .repository import SqlScheduleRepository
from . import crud, schemas

__all__ = [
    "Base",
    "ScheduleEntryModel",
    "SqlScheduleRepository",
    "UserModel",
    "create_session_factory",
    "create_tables",
    "crud",
    "drop_tables",
    "init_engine",
    "is_database_available",
    "schemas",
    "session_scope",
]
