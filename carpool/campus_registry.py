"""
Fixed registry of named campuses and their coordinates.
"""

from typing import Dict, List, Mapping, Optional

from carpool.errors import UnknownCampus
from carpool.models.geo import GeoCoordinate

CAMPUS_COORDS: Dict[str, GeoCoordinate] = {
    "Main Campus": GeoCoordinate(lat=49.2606, lng=-123.2460),
    "UBC Campus": GeoCoordinate(lat=49.2606, lng=-123.2460),
    "North Campus": GeoCoordinate(lat=49.3050, lng=-123.1440),
}


class CampusRegistry:
    """Resolves campus names to coordinates."""

    def __init__(self, campuses: Optional[Mapping[str, GeoCoordinate]] = None):
        self._campuses: Dict[str, GeoCoordinate] = dict(CAMPUS_COORDS if campuses is None else campuses)

    def names(self) -> List[str]:
        return list(self._campuses.keys())

    def resolve(self, name: str) -> GeoCoordinate:
        coords = self._campuses.get(name)
        if coords is None:
            raise UnknownCampus(name, allowed=self.names())
        return coords

    def __contains__(self, name: object) -> bool:
        return name in self._campuses


campus_registry = CampusRegistry()
CAMPUS_NAMES: List[str] = campus_registry.names()
