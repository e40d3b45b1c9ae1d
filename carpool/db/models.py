"""
SQLAlchemy models for the carpool database.

These models define the database schema for:
- Users (profile, campus, home location, role)
- Weekly schedule entries (one per user and weekday)
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class UserModel(Base):
    """Registered commuter"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    photo_url = Column(String, nullable=True)
    campus = Column(String, nullable=False, index=True)
    home_area = Column(String, nullable=False, default="")
    home_lat = Column(Float, nullable=True)
    home_lng = Column(Float, nullable=True)
    role = Column(String, nullable=False, default="PASSENGER")  # DRIVER, PASSENGER, BOTH
    time_zone = Column(String, nullable=False, default="America/Vancouver")
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    schedule_entries = relationship(
        "ScheduleEntryModel", back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<UserModel(id='{self.id}', name='{self.name}', role='{self.role}')>"


class ScheduleEntryModel(Base):
    """Commute times for one weekday"""
    __tablename__ = "schedule_entries"
    __table_args__ = (
        UniqueConstraint("user_id", "day_of_week", name="uq_schedule_user_day"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    to_campus_mins = Column(Integer, nullable=False)
    go_home_mins = Column(Integer, nullable=False)
    to_campus_flex_min = Column(Integer, default=15, nullable=False)
    go_home_flex_min = Column(Integer, default=15, nullable=False)
    to_campus_max_detour_mins = Column(Integer, default=10, nullable=False)
    go_home_max_detour_mins = Column(Integer, default=10, nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("UserModel", back_populates="schedule_entries")

    def __repr__(self):
        return f"<ScheduleEntryModel(user_id='{self.user_id}', day={self.day_of_week})>"
