"""
Type definitions for the carpool matching service.

This module contains type aliases used across the package.
"""

from typing import Literal, Tuple

# =============================================================================
# Basic type aliases
# =============================================================================

# Time in minutes since midnight (0-1439)
Minutes = int

# Day of week, 0 = Sunday ... 6 = Saturday
DayOfWeek = int

# Inclusive (min, max) minute band used for candidate lookups
TimeRange = Tuple[Minutes, Minutes]

# Schedule field the time band applies to
TimeField = Literal["to_campus", "go_home"]

# =============================================================================
# Routing types
# =============================================================================

# Upstream location string: "lat,lng" or "place_id:<id>"
LocationString = str
