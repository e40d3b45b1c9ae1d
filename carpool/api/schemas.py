"""
Request bodies and response envelopes for the HTTP adapter.
"""

from typing import Annotated, Any, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from carpool.time_utils import is_valid_time_format


def _check_time(value: str) -> str:
    if not is_valid_time_format(value):
        raise ValueError(f"Invalid time format: {value!r}. Expected HH:MM")
    return value


TimeOfDay = Annotated[str, AfterValidator(_check_time)]


class _MatchRequestBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day_of_week: int = Field(..., alias="dayOfWeek", ge=0, le=6)
    flexibility_mins: int = Field(15, alias="flexibilityMins", ge=0, le=120)


class ToCampusMatchRequest(_MatchRequestBase):
    to_campus_time: TimeOfDay = Field(..., alias="toCampusTime")


class GoHomeMatchRequest(_MatchRequestBase):
    go_home_time: TimeOfDay = Field(..., alias="goHomeTime")


class ApiResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: Any = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: Optional[List[str]] = None
    allowed: Optional[List[str]] = None
