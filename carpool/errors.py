"""
Error taxonomy for the matching core.

Every error here propagates to the immediate caller; the core never logs and
swallows them. The HTTP adapter maps them to status codes.
"""

from typing import Any, Dict, List, Optional


class CarpoolError(Exception):
    """Base class for errors raised by the matching core."""


class InvalidTimeFormat(CarpoolError, ValueError):
    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid time format {value!r}. Expected HH:MM (24-hour format)")


class OutOfRange(CarpoolError, ValueError):
    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Minutes must be between 0 and 1439, got {value!r}")


class UserNotFound(CarpoolError):
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class UnknownCampus(CarpoolError):
    """Campus name is not registered; carries the valid names for display."""

    def __init__(self, name: str, allowed: Optional[List[str]] = None):
        self.name = name
        self.allowed = list(allowed or [])
        super().__init__(f"Unknown campus: {name}")


class PlaceNotFound(CarpoolError):
    def __init__(self, place_id: str):
        self.place_id = place_id
        super().__init__(f"Place not found: {place_id}")


class RoutingProviderError(CarpoolError):
    """Upstream routing failure (HTTP, JSON or provider status)."""

    def __init__(self, message: str, meta: Optional[Dict[str, Any]] = None):
        self.meta = dict(meta or {})
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if not self.meta:
            return base
        return f"{base} {self.meta}"


class InvalidDayOfWeek(CarpoolError, ValueError):
    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Day of week must be between 0 and 6, got {value!r}")


class DriverNotFound(CarpoolError):
    """Driver id unknown, inactive or not a driver."""

    def __init__(self, driver_id: str):
        self.driver_id = driver_id
        super().__init__(f"Driver not found or not available: {driver_id}")


class DriverUnavailable(CarpoolError):
    """Driver exists but has no enabled schedule entry for the day."""

    def __init__(self, driver_id: str, day_of_week: int):
        self.driver_id = driver_id
        self.day_of_week = day_of_week
        super().__init__(f"Driver {driver_id} not available on day {day_of_week}")
