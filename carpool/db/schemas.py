"""
Pydantic schemas for database write operations.

These are separate from the domain models in carpool.models, which are what
the match engine reads.
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from carpool.models.matching import Role


class UserCreate(BaseModel):
    """Schema for creating a user"""
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    photo_url: Optional[str] = None
    campus: str
    home_area: str = ""
    home_lat: Optional[float] = Field(None, ge=-90, le=90)
    home_lng: Optional[float] = Field(None, ge=-180, le=180)
    role: Role = Role.PASSENGER
    time_zone: str = "America/Vancouver"
    is_active: bool = True

    @model_validator(mode="after")
    def validate_home_pair(self) -> "UserCreate":
        if (self.home_lat is None) != (self.home_lng is None):
            raise ValueError("home_lat and home_lng must be provided together")
        return self


class ScheduleEntryUpsert(BaseModel):
    """Schema for creating or replacing a user's entry for one weekday"""
    day_of_week: int = Field(..., ge=0, le=6)
    to_campus_mins: int = Field(..., ge=0, le=1439)
    go_home_mins: int = Field(..., ge=0, le=1439)
    to_campus_flex_min: int = Field(15, ge=0, le=120)
    go_home_flex_min: int = Field(15, ge=0, le=120)
    to_campus_max_detour_mins: int = Field(10, ge=0)
    go_home_max_detour_mins: int = Field(10, ge=0)
    enabled: bool = True
