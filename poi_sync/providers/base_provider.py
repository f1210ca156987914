"""
Base Provider Interface for external POI data sources
All provider implementations must inherit from this abstract class
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..model.google import (
    LocationBias,
    PlaceDetails,
    SearchNearbyResponse,
    SearchTextResponse,
)


class BaseProvider(ABC):
    """
    Abstract base class for POI data providers.

    Every operation may fail; implementations raise ``ExternalSourceError``
    carrying the provider's service name and the underlying cause.
    """

    @abstractmethod
    def search_nearby(self, lat: float, lng: float, radius: float, place_type: str) -> SearchNearbyResponse:
        """
        Find place stubs of ``place_type`` within ``radius`` meters.

        Example:
            >>> provider.search_nearby(41.0082, 28.9784, 1000.0, "restaurant")
        """
        pass

    @abstractmethod
    def search_text(
        self,
        query: str,
        lang: str,
        max_results: int,
        location_bias: Optional[LocationBias] = None
    ) -> SearchTextResponse:
        """
        Free-text place search.

        Example:
            >>> provider.search_text("coffee near galata", "en", 10)
        """
        pass

    @abstractmethod
    def get_details(self, place_id: str) -> PlaceDetails:
        """
        Get detailed information about a specific place

        Example:
            >>> provider.get_details("ChIJv3H_AT8ZQjERWohner53iwk")
        """
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """Human-readable service name used in errors and logs."""
        pass
