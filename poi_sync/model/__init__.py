"""
Models Package
==============

- google: Google Places API (New) wire models
- place: stored POI record and its mappings
"""

from .google import (
    DisplayName,
    LatLng,
    OpeningHours,
    NearbyPlace,
    TextSearchPlace,
    PlaceDetails,
    SearchNearbyResponse,
    SearchTextResponse,
    Circle,
    LocationBias,
)
from .place import PlaceRecord, PlaceOpeningHours, GeoJSONLocation, UNKNOWN_NAME, UNKNOWN_ADDRESS

__all__ = [
    'DisplayName',
    'LatLng',
    'OpeningHours',
    'NearbyPlace',
    'TextSearchPlace',
    'PlaceDetails',
    'SearchNearbyResponse',
    'SearchTextResponse',
    'Circle',
    'LocationBias',
    'PlaceRecord',
    'PlaceOpeningHours',
    'GeoJSONLocation',
    'UNKNOWN_NAME',
    'UNKNOWN_ADDRESS',
]
