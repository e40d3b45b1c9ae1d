"""
Geographic value types shared by routing providers and the match engine.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GeoCoordinate(BaseModel):
    """Latitude/longitude pair in decimal degrees."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={"example": {"lat": 49.2606, "lng": -123.2460}},
    )

    lat: float
    lng: float

    def as_location(self) -> str:
        """Upstream "lat,lng" location string."""
        return f"{self.lat},{self.lng}"


class PlaceSuggestion(BaseModel):
    """Autocomplete hit."""

    place_id: str
    label: str


class PlaceDetails(BaseModel):
    """Resolved place with its coordinates."""

    place_id: str
    label: str
    address: str
    lat: float
    lng: float

    @property
    def coordinate(self) -> GeoCoordinate:
        return GeoCoordinate(lat=self.lat, lng=self.lng)


class DetourQuote(BaseModel):
    """Cost of routing a driver through a passenger stop."""

    model_config = ConfigDict(frozen=True)

    base_minutes: int = Field(..., ge=0, description="Direct origin -> destination")
    via_minutes: int = Field(..., ge=0, description="Origin -> stop -> destination")
    extra_minutes: int = Field(..., ge=0, description="max(0, via - base)")

    @classmethod
    def from_durations(cls, base_minutes: int, via_minutes: int) -> "DetourQuote":
        return cls(
            base_minutes=base_minutes,
            via_minutes=via_minutes,
            extra_minutes=max(0, via_minutes - base_minutes),
        )

    @model_validator(mode="after")
    def validate_extra(self) -> "DetourQuote":
        if self.extra_minutes != max(0, self.via_minutes - self.base_minutes):
            raise ValueError("extra_minutes must equal max(0, via_minutes - base_minutes)")
        return self
