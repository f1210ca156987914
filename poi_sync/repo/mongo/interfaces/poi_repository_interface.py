"""
POI Repository Interface - MongoDB Data Access Layer
======================================================

Purpose:
- Define abstract interface for place store operations
- Enable dependency injection and unit testing
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ....model.place import PlaceRecord


class POIRepositoryInterface(ABC):
    """
    Abstract interface for POI (Point of Interest) data access.

    Implementations:
    - POIRepository (MongoDB) - Production implementation
    - In-memory fakes - For unit testing

    Writes are upserts keyed by ``place_id``; last write wins.
    """

    @abstractmethod
    def find_by_id(self, place_id: str) -> Optional[PlaceRecord]:
        """
        Get POI by external place identifier.

        Returns:
            PlaceRecord if found, None otherwise
        """
        pass

    @abstractmethod
    def find_near(
        self,
        lat: float,
        lng: float,
        distance_km: float,
        place_type: Optional[str] = None
    ) -> List[PlaceRecord]:
        """
        Find POIs within ``distance_km`` of a point, nearest first.

        Args:
            lat: Latitude of the center
            lng: Longitude of the center
            distance_km: Search radius in kilometers
            place_type: Optional type filter (e.g., "restaurant")
        """
        pass

    @abstractmethod
    def find_by_text(self, query: str, limit: int = 20) -> List[PlaceRecord]:
        """Full-text search over name and address, best match first."""
        pass

    @abstractmethod
    def upsert(self, record: PlaceRecord) -> PlaceRecord:
        """Insert or replace the record with the same ``place_id``."""
        pass

    @abstractmethod
    def upsert_many(self, records: Iterable[PlaceRecord]) -> int:
        """
        Upsert several records.

        Returns:
            Number of records written
        """
        pass

    @abstractmethod
    def count(self) -> int:
        """Total number of stored POIs."""
        pass
