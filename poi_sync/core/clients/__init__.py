"""
Database Clients Module
=======================

Client connections for:
- MongoDB (place store)
- Redis (cache tier, rate limit counters)
"""

from .mongodb_client import MongoDBClient
from .redis_client import create_redis_client

__all__ = [
    'MongoDBClient',
    'create_redis_client'
]
