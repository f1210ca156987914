"""
Core Module
============

Infrastructure components for the application:
- clients/: MongoDB and Redis connections
- cache/: Redis cache tier
- rate_limiter/: request throttling and attempt lockout
- container: per-app dependency injection container

Usage:
    from poi_sync.core.clients.mongodb_client import MongoDBClient
    from poi_sync.core.rate_limiter import rate_limit
    from poi_sync.core import get_container
"""

from .container import ServiceContainer, get_container

__all__ = [
    'ServiceContainer',
    'get_container',
]
