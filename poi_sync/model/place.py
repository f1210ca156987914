"""
Place Record Data Model
=======================

Purpose:
- Pydantic model for documents in the ``pois`` collection
- Mapping between Google wire models and stored records

The external place identifier is the only identity: it is immutable and
is the sole upsert key. ``updated_at`` is stamped by the repository on
every write.
"""

from typing import Any, Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from .google import (
    DisplayName,
    LatLng,
    NearbyPlace,
    OpeningHours,
    PlaceDetails,
    TextSearchPlace,
)

UNKNOWN_NAME = "Unnamed Place"
UNKNOWN_ADDRESS = "No Address"


class GeoJSONLocation(BaseModel):
    """GeoJSON Point for MongoDB 2dsphere index."""
    type: str = Field(default="Point", description="GeoJSON type")
    coordinates: List[float] = Field(..., description="[longitude, latitude]")

    @field_validator('coordinates')
    @classmethod
    def validate_coordinates(cls, v):
        """Validate coordinates format."""
        if len(v) != 2:
            raise ValueError("Coordinates must be [longitude, latitude]")

        lng, lat = v
        if not (-180 <= lng <= 180):
            raise ValueError(f"Longitude must be between -180 and 180, got {lng}")
        if not (-90 <= lat <= 90):
            raise ValueError(f"Latitude must be between -90 and 90, got {lat}")

        return v

    @classmethod
    def from_lat_lng(cls, location: Optional[LatLng]) -> Optional["GeoJSONLocation"]:
        if location is None:
            return None
        return cls(coordinates=[location.longitude, location.latitude])

    def to_lat_lng(self) -> LatLng:
        lng, lat = self.coordinates
        return LatLng(latitude=lat, longitude=lng)


class PlaceOpeningHours(BaseModel):
    open_now: Optional[bool] = None
    weekday_descriptions: Optional[List[str]] = None


class PlaceRecord(BaseModel):
    """A POI as persisted in the place store."""
    place_id: str = Field(..., min_length=1, description="External place identifier")
    name: str
    address: str
    type: Optional[str] = None
    location: Optional[GeoJSONLocation] = None
    opening_hours: Optional[PlaceOpeningHours] = None
    updated_at: Optional[datetime] = None

    # ========== From Google payloads ==========

    @classmethod
    def from_nearby(cls, place: NearbyPlace, place_type: Optional[str] = None) -> "PlaceRecord":
        return cls(
            place_id=place.id,
            name=_display_text(place.display_name),
            address=UNKNOWN_ADDRESS,
            type=place_type,
            location=GeoJSONLocation.from_lat_lng(place.location),
        )

    @classmethod
    def from_text_search(cls, place: TextSearchPlace) -> "PlaceRecord":
        # Text search gives no type guarantee
        return cls(
            place_id=place.id,
            name=_display_text(place.display_name),
            address=place.formatted_address or UNKNOWN_ADDRESS,
            location=GeoJSONLocation.from_lat_lng(place.location),
        )

    @classmethod
    def from_details(cls, details: PlaceDetails, place_type: Optional[str] = None) -> "PlaceRecord":
        opening_hours = None
        if details.opening_hours is not None:
            opening_hours = PlaceOpeningHours(
                open_now=details.opening_hours.open_now,
                weekday_descriptions=details.opening_hours.weekday_descriptions,
            )
        return cls(
            place_id=details.id,
            name=_display_text(details.display_name),
            address=details.formatted_address or UNKNOWN_ADDRESS,
            type=place_type,
            location=GeoJSONLocation.from_lat_lng(details.location),
            opening_hours=opening_hours,
        )

    # ========== To response payloads ==========

    def to_nearby_place(self, lang: Optional[str] = None) -> NearbyPlace:
        return NearbyPlace(
            id=self.place_id,
            display_name=DisplayName(text=self.name, language_code=lang),
            location=self.location.to_lat_lng() if self.location else None,
        )

    def to_place_details(self, lang: Optional[str] = None) -> PlaceDetails:
        opening_hours = None
        if self.opening_hours is not None:
            opening_hours = OpeningHours(
                open_now=self.opening_hours.open_now,
                weekday_descriptions=self.opening_hours.weekday_descriptions,
            )
        return PlaceDetails(
            id=self.place_id,
            display_name=DisplayName(text=self.name, language_code=lang),
            formatted_address=self.address,
            location=self.location.to_lat_lng() if self.location else None,
            opening_hours=opening_hours,
        )

    # ========== MongoDB documents ==========

    def to_document(self) -> Dict[str, Any]:
        """Document body for ``$set``; ``updated_at`` is owned by the repository."""
        return self.model_dump(mode="python", exclude={"updated_at"})

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "PlaceRecord":
        data = {k: v for k, v in doc.items() if k != "_id"}
        return cls.model_validate(data)


def _display_text(display_name: Optional[DisplayName]) -> str:
    if display_name is not None and display_name.text:
        return display_name.text
    return UNKNOWN_NAME
