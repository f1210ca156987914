"""
Common Module
=============

Shared exception hierarchy and logging setup.
"""

from .exceptions import (
    PoiSyncError,
    ValidationError,
    ExternalSourceError,
    StoreError,
    CacheError,
    RateLimitExceeded,
    NotFoundError
)

__all__ = [
    'PoiSyncError',
    'ValidationError',
    'ExternalSourceError',
    'StoreError',
    'CacheError',
    'RateLimitExceeded',
    'NotFoundError'
]
