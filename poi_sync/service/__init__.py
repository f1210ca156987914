"""
Service Layer
=============

- PlacesService: tiered cache → store → Google resolution
- LocationSyncService: bulk sync pipeline
"""

from .places_service import PlacesService
from .location_sync_service import LocationSyncService, SyncResult

__all__ = ['PlacesService', 'LocationSyncService', 'SyncResult']
