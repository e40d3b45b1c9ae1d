"""
Carpool matching service: schedule matching with geo-detour ranking.
"""

__version__ = "1.0.0"
