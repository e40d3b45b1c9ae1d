"""
Schedule, candidate and match result models.

Match results are a tagged union: ``TimeMatch`` for the degraded path (no
location data on the requester) and ``DetourMatch`` when the detour quote was
computed, so a half-populated result cannot exist.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from carpool.models.geo import DetourQuote, GeoCoordinate
from carpool.type_defs import TimeField


class Role(str, Enum):
    DRIVER = "DRIVER"
    PASSENGER = "PASSENGER"
    BOTH = "BOTH"


class RoleGroup(str, Enum):
    """Search target; BOTH-role users match either group."""

    DRIVER = "DRIVER"
    PASSENGER = "PASSENGER"

    def roles(self) -> List[Role]:
        return [Role(self.value), Role.BOTH]


class Direction(str, Enum):
    TO_CAMPUS = "TO_CAMPUS"
    GO_HOME = "GO_HOME"

    @property
    def time_field(self) -> TimeField:
        return "to_campus" if self is Direction.TO_CAMPUS else "go_home"


class ScheduleEntry(BaseModel):
    """One weekday of a user's commute schedule."""

    id: str
    owner_user_id: str
    day_of_week: int = Field(..., ge=0, le=6)
    to_campus_minutes: int = Field(..., ge=0, le=1439)
    go_home_minutes: int = Field(..., ge=0, le=1439)
    to_campus_flex_minutes: int = Field(15, ge=0)
    go_home_flex_minutes: int = Field(15, ge=0)
    to_campus_max_detour_minutes: int = Field(10, ge=0)
    go_home_max_detour_minutes: int = Field(10, ge=0)
    enabled: bool = True

    def minutes_for(self, direction: Direction) -> int:
        if direction is Direction.TO_CAMPUS:
            return self.to_campus_minutes
        return self.go_home_minutes

    def max_detour_for(self, direction: Direction) -> int:
        if direction is Direction.TO_CAMPUS:
            return self.to_campus_max_detour_minutes
        return self.go_home_max_detour_minutes


class CandidateUser(BaseModel):
    """Public profile of a potential counterpart."""

    id: str
    name: str
    photo_url: Optional[str] = None
    campus: str
    home_area: str
    home: Optional[GeoCoordinate] = None
    role: Role
    time_zone: str = "America/Vancouver"


class RequesterProfile(BaseModel):
    """The fields matching needs about the user asking for matches."""

    id: str
    campus: str
    home_area: str
    home: Optional[GeoCoordinate] = None


class CandidateRow(BaseModel):
    user: CandidateUser
    schedule: ScheduleEntry


class MatchScore(BaseModel):
    time_difference_minutes: int = Field(..., ge=0)
    field: TimeField
    target_time: str
    entry_time: str
    to_campus_time: str
    go_home_time: str


class TimeMatch(BaseModel):
    """Candidate ranked by time only."""

    kind: Literal["time"] = "time"
    candidate: CandidateUser
    schedule: ScheduleEntry
    score: MatchScore

    @property
    def time_difference_minutes(self) -> int:
        return self.score.time_difference_minutes


class DetourMatch(BaseModel):
    """Candidate ranked by detour cost, then time."""

    kind: Literal["detour"] = "detour"
    candidate: CandidateUser
    schedule: ScheduleEntry
    score: MatchScore
    detour: DetourQuote

    @property
    def time_difference_minutes(self) -> int:
        return self.score.time_difference_minutes

    @property
    def extra_detour_minutes(self) -> int:
        return self.detour.extra_minutes


MatchResult = Annotated[Union[TimeMatch, DetourMatch], Field(discriminator="kind")]


class MatchResponse(BaseModel):
    results: List[MatchResult] = Field(default_factory=list)
    degraded_note: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.degraded_note is not None


class DriverAvailability(BaseModel):
    driver: CandidateUser
    schedule: ScheduleEntry
    to_campus_time: str
    go_home_time: str
