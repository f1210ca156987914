"""
Google Places API (New) wire models
===================================

Pydantic models for the subset of the Places API payloads this service
reads. Field names are snake_case in Python and camelCase on the wire;
cached payloads are dumped ``by_alias`` so they keep the upstream shape.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class GoogleModel(BaseModel):
    """Base for wire models: accept both alias and field names, ignore extras."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class DisplayName(GoogleModel):
    text: Optional[str] = None
    language_code: Optional[str] = Field(None, alias="languageCode")


class LatLng(GoogleModel):
    latitude: float
    longitude: float


class OpeningHours(GoogleModel):
    open_now: Optional[bool] = Field(None, alias="openNow")
    weekday_descriptions: Optional[List[str]] = Field(None, alias="weekdayDescriptions")


class NearbyPlace(GoogleModel):
    """Stub returned by Nearby Search (id + minimal display info)."""
    id: str
    display_name: Optional[DisplayName] = Field(None, alias="displayName")
    location: Optional[LatLng] = None


class TextSearchPlace(GoogleModel):
    id: str
    display_name: Optional[DisplayName] = Field(None, alias="displayName")
    formatted_address: Optional[str] = Field(None, alias="formattedAddress")
    location: Optional[LatLng] = None


class PlaceDetails(GoogleModel):
    id: str
    display_name: Optional[DisplayName] = Field(None, alias="displayName")
    formatted_address: Optional[str] = Field(None, alias="formattedAddress")
    location: Optional[LatLng] = None
    opening_hours: Optional[OpeningHours] = Field(None, alias="regularOpeningHours")


class SearchNearbyResponse(GoogleModel):
    # The API omits "places" entirely when nothing matched
    places: List[NearbyPlace] = Field(default_factory=list)


class SearchTextResponse(GoogleModel):
    places: List[TextSearchPlace] = Field(default_factory=list)


class Circle(GoogleModel):
    center: LatLng
    radius: float = Field(..., gt=0)


class LocationBias(GoogleModel):
    circle: Circle
