"""
Providers Package
=================

External POI data sources. ``BaseProvider`` is the contract consumed by
the resolution engine and the sync pipeline.
"""

from .base_provider import BaseProvider
from .places.google_places_provider import GooglePlacesProvider

__all__ = ['BaseProvider', 'GooglePlacesProvider']
