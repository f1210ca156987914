"""
POI Repository - MongoDB Data Access Layer
===========================================

Purpose:
- Upserts keyed by the external place identifier
- Geo-spatial queries (2dsphere + type)
- Text search over name and address
"""

from typing import Iterable, List, Optional
from datetime import datetime, timezone
import logging

from pymongo import UpdateOne
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ...common.exceptions import StoreError
from ...model.place import PlaceRecord
from .interfaces import POIRepositoryInterface

logger = logging.getLogger(__name__)


class POIRepository(POIRepositoryInterface):
    """
    Repository for the ``pois`` collection.

    Every pymongo failure is raised as ``StoreError``.
    """

    def __init__(self, collection: Collection):
        self.collection = collection
        logger.info(f"[MONGODB] POI collection ready: {collection.name}")

    def find_by_id(self, place_id: str) -> Optional[PlaceRecord]:
        try:
            doc = self.collection.find_one({"place_id": place_id})
        except PyMongoError as e:
            logger.error(f"[MONGODB] find_by_id failed for {place_id}: {e}")
            raise StoreError(f"Failed to load POI '{place_id}'") from e

        return PlaceRecord.from_document(doc) if doc else None

    def find_near(
        self,
        lat: float,
        lng: float,
        distance_km: float,
        place_type: Optional[str] = None
    ) -> List[PlaceRecord]:
        """
        Find POIs near a point.

        Example:
            restaurants = poi_repo.find_near(41.0082, 28.9784, 1.5, "restaurant")
        """
        query = {
            "location": {
                "$nearSphere": {
                    "$geometry": {
                        "type": "Point",
                        "coordinates": [lng, lat]
                    },
                    "$maxDistance": distance_km * 1000  # meters
                }
            }
        }
        if place_type:
            query["type"] = place_type

        try:
            docs = list(self.collection.find(query))
        except PyMongoError as e:
            logger.error(f"[MONGODB] find_near failed: {e}")
            raise StoreError("Failed to query nearby POIs") from e

        logger.debug(f"[MONGODB] find_near ({lat}, {lng}, {distance_km}km, {place_type}) -> {len(docs)}")
        return [PlaceRecord.from_document(doc) for doc in docs]

    def find_by_text(self, query: str, limit: int = 20) -> List[PlaceRecord]:
        try:
            cursor = self.collection.find(
                {"$text": {"$search": query}},
                {"score": {"$meta": "textScore"}}
            ).sort([("score", {"$meta": "textScore"})]).limit(limit)
            docs = list(cursor)
        except PyMongoError as e:
            logger.error(f"[MONGODB] Text search failed for '{query}': {e}")
            raise StoreError("Failed to search POIs") from e

        return [PlaceRecord.from_document(_without_score(doc)) for doc in docs]

    def upsert(self, record: PlaceRecord) -> PlaceRecord:
        now = datetime.now(timezone.utc)
        try:
            self.collection.update_one(
                {"place_id": record.place_id},
                {"$set": {**record.to_document(), "updated_at": now}},
                upsert=True
            )
        except PyMongoError as e:
            logger.error(f"[MONGODB] Upsert failed for {record.place_id}: {e}")
            raise StoreError(f"Failed to save POI '{record.place_id}'") from e

        return record.model_copy(update={"updated_at": now})

    def upsert_many(self, records: Iterable[PlaceRecord]) -> int:
        now = datetime.now(timezone.utc)
        operations = [
            UpdateOne(
                {"place_id": record.place_id},
                {"$set": {**record.to_document(), "updated_at": now}},
                upsert=True
            )
            for record in records
        ]
        if not operations:
            return 0

        try:
            result = self.collection.bulk_write(operations, ordered=False)
        except PyMongoError as e:
            logger.error(f"[MONGODB] Bulk upsert of {len(operations)} POIs failed: {e}")
            raise StoreError("Failed to save POIs") from e

        written = result.upserted_count + result.matched_count
        logger.info(f"[MONGODB] Upserted {written} POIs ({result.upserted_count} new)")
        return written

    def count(self) -> int:
        try:
            return self.collection.count_documents({})
        except PyMongoError as e:
            raise StoreError("Failed to count POIs") from e


def _without_score(doc):
    doc.pop("score", None)
    return doc
