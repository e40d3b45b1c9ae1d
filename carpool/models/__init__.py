"""
Data models for the carpool matching service.
"""

from .geo import DetourQuote, GeoCoordinate, PlaceDetails, PlaceSuggestion
from .matching import (
    CandidateRow,
    CandidateUser,
    DetourMatch,
    Direction,
    DriverAvailability,
    MatchResponse,
    MatchResult,
    MatchScore,
    RequesterProfile,
    Role,
    RoleGroup,
    ScheduleEntry,
    TimeMatch,
)

__all__ = [
    "CandidateRow",
    "CandidateUser",
    "DetourMatch",
    "DetourQuote",
    "Direction",
    "DriverAvailability",
    "GeoCoordinate",
    "MatchResponse",
    "MatchResult",
    "MatchScore",
    "PlaceDetails",
    "PlaceSuggestion",
    "RequesterProfile",
    "Role",
    "RoleGroup",
    "ScheduleEntry",
    "TimeMatch",
]
