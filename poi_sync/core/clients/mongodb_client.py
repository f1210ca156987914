"""
MongoDB Client
==============

Purpose:
- Owns the MongoClient connection pool for the place store
- Creates the POI collection indexes on startup

One instance is built per application in ``create_app`` and handed to the
repository, so tests can construct the repository around any collection.

Usage:
    client = MongoDBClient.from_config(Config)
    client.create_indexes()
    pois = client.get_collection(Config.MONGODB_POI_COLLECTION)
"""

import logging
from typing import Optional

from pymongo import MongoClient, ASCENDING, GEOSPHERE, TEXT
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class MongoDBClient:
    """
    MongoDB client wrapper.

    Features:
    - Connection pooling (configurable)
    - Health checking
    - Index bootstrap for the ``pois`` collection
    """

    def __init__(
        self,
        uri: str,
        db_name: str,
        poi_collection: str = "pois",
        max_pool_size: int = 50,
        server_selection_timeout_ms: int = 5000,
        connect_timeout_ms: int = 10000
    ):
        self.poi_collection_name = poi_collection

        # Mask credentials for logging
        masked_uri = uri.split('@')[-1] if '@' in uri else uri
        logger.info(f"[MONGODB] Connecting to MongoDB: {masked_uri}")

        # MongoClient connects lazily; no I/O happens here
        self._client = MongoClient(
            uri,
            maxPoolSize=max_pool_size,
            serverSelectionTimeoutMS=server_selection_timeout_ms,
            connectTimeoutMS=connect_timeout_ms,
            retryWrites=True,
            retryReads=True
        )
        self._db: Database = self._client[db_name]

    @classmethod
    def from_config(cls, config) -> "MongoDBClient":
        return cls(
            uri=config.MONGODB_URI,
            db_name=config.MONGODB_DB_NAME,
            poi_collection=config.MONGODB_POI_COLLECTION,
            max_pool_size=config.MONGODB_MAX_POOL_SIZE,
            server_selection_timeout_ms=config.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
            connect_timeout_ms=config.MONGODB_CONNECT_TIMEOUT_MS
        )

    def get_database(self) -> Database:
        return self._db

    def get_collection(self, collection_name: Optional[str] = None) -> Collection:
        """Get a collection (defaults to the POI collection)."""
        return self._db[collection_name or self.poi_collection_name]

    def is_healthy(self) -> bool:
        """Ping the server."""
        try:
            self._client.admin.command('ping')
            return True
        except PyMongoError as e:
            logger.warning(f"[MONGODB] Health check failed: {e}")
            return False

    def create_indexes(self):
        """
        Create indexes for the POI collection.

        - place_id (unique): upsert key
        - location (2dsphere) + type: compound index for "nearby restaurants"
        - location (2dsphere): geo lookups without a type
        - name/address text index, name weighted above address
        """
        collection = self.get_collection()
        logger.info("[MONGODB] Creating indexes...")

        collection.create_index("place_id", unique=True, name="idx_place_id")
        collection.create_index(
            [("location", GEOSPHERE), ("type", ASCENDING)],
            name="idx_geo_type"
        )
        collection.create_index([("location", GEOSPHERE)], name="idx_location_2dsphere")
        collection.create_index(
            [("name", TEXT), ("address", TEXT)],
            weights={"name": 2, "address": 1},
            name="idx_text_search",
            default_language="none"
        )

        logger.info(f"[MONGODB] Indexes ready on '{collection.name}': place_id, geo+type, location, text")

    def close(self):
        """Close MongoDB connection. Called on application shutdown."""
        logger.info("[MONGODB] Closing MongoDB connection...")
        self._client.close()
