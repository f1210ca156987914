"""
MongoDB repositories.
"""

from .interfaces import POIRepositoryInterface
from .poi_repository import POIRepository

__all__ = ['POIRepositoryInterface', 'POIRepository']
