"""
MongoDB service for database operations
"""
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any, Sequence, Tuple
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from bson import ObjectId
import logging

from ..config import settings

logger = logging.getLogger(__name__)

USERS = "users"
STUDENTS = "students"
TEACHERS = "teachers"
INSTITUTIONS = "institutions"
SCHEMES = "schemes"

SortSpec = Sequence[Tuple[str, int]]
NEWEST_FIRST: SortSpec = [("created_at", DESCENDING)]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MongoService:
    """Service for MongoDB operations"""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.db = None

    async def connect(self):
        """Connect to MongoDB"""
        try:
            self.client = AsyncIOMotorClient(
                settings.mongodb_url,
                serverSelectionTimeoutMS=5000,
                tz_aware=True
            )
            self.db = self.client[settings.mongodb_db_name]

            # Test connection
            await self.client.admin.command('ping')
            logger.info(f"Connected to MongoDB database: {settings.mongodb_db_name}")

        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    async def close(self):
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed")

    async def health_check(self) -> bool:
        """Check MongoDB connection health"""
        if not self.client:
            return False
        try:
            await self.client.admin.command('ping')
            return True
        except Exception:
            return False

    async def setup_indexes(self):
        """Create the unique and lookup indexes the API relies on"""
        try:
            await self.db[USERS].create_index("email", unique=True)
            await self.db[STUDENTS].create_index("email", unique=True)
            await self.db[STUDENTS].create_index("apaar_id", unique=True, sparse=True)
            await self.db[STUDENTS].create_index("enrollment_number", unique=True, sparse=True)
            await self.db[STUDENTS].create_index([("current_stage", ASCENDING)])
            await self.db[STUDENTS].create_index([("aadhaar_verified", ASCENDING), ("is_active", ASCENDING)])
            await self.db[TEACHERS].create_index("email", unique=True)
            await self.db[TEACHERS].create_index("apar_id", unique=True, sparse=True)
            await self.db[INSTITUTIONS].create_index("aishe_code", unique=True)
            await self.db[SCHEMES].create_index("name", unique=True)
            await self.db[SCHEMES].create_index([("type", ASCENDING), ("is_active", ASCENDING)])
            await self.db[SCHEMES].create_index([("application_end_date", ASCENDING)])
            logger.info("Database indexes set up successfully")
        except Exception as e:
            logger.error(f"Failed to set up database indexes: {e}")
            raise

    # Generic collection operations
    async def insert_one(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a document, stamping created_at/updated_at"""
        now = utc_now()
        document = {**document, "created_at": now, "updated_at": now}
        result = await self.db[collection].insert_one(document)
        document["_id"] = result.inserted_id
        logger.info(f"Inserted document into {collection}: {result.inserted_id}")
        return document

    async def find_by_id(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        return await self.db[collection].find_one({"_id": ObjectId(doc_id)})

    async def find_one(self, collection: str, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self.db[collection].find_one(query)

    async def find_many(
        self,
        collection: str,
        query: Dict[str, Any],
        sort: Optional[SortSpec] = None,
        limit: int = 0
    ) -> List[Dict[str, Any]]:
        """Find documents matching a query, optionally sorted and limited"""
        cursor = self.db[collection].find(query)
        if sort:
            cursor = cursor.sort(list(sort))
        if limit:
            cursor = cursor.limit(limit)
        return [doc async for doc in cursor]

    async def update_by_id(
        self,
        collection: str,
        doc_id: str,
        fields: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Set fields on a document and return it after the update"""
        update = {**fields, "updated_at": utc_now()}
        return await self.db[collection].find_one_and_update(
            {"_id": ObjectId(doc_id)},
            {"$set": update},
            return_document=ReturnDocument.AFTER
        )

    async def push_by_id(
        self,
        collection: str,
        doc_id: str,
        field: str,
        item: Dict[str, Any],
        extra_fields: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """Append an item to an array field and return the updated document"""
        update = {**(extra_fields or {}), "updated_at": utc_now()}
        return await self.db[collection].find_one_and_update(
            {"_id": ObjectId(doc_id)},
            {"$push": {field: item}, "$set": update},
            return_document=ReturnDocument.AFTER
        )

    async def delete_by_id(self, collection: str, doc_id: str) -> bool:
        result = await self.db[collection].delete_one({"_id": ObjectId(doc_id)})
        return result.deleted_count > 0

    async def count(self, collection: str, query: Optional[Dict[str, Any]] = None) -> int:
        return await self.db[collection].count_documents(query or {})

    async def average(
        self,
        collection: str,
        field: str,
        match: Optional[Dict[str, Any]] = None
    ) -> Optional[float]:
        """Average of a numeric field over matching documents"""
        pipeline = [
            {"$match": match or {}},
            {"$group": {"_id": None, "avg": {"$avg": f"${field}"}}}
        ]
        async for row in self.db[collection].aggregate(pipeline):
            return row.get("avg")
        return None

    async def group_count(
        self,
        collection: str,
        field: str,
        match: Optional[Dict[str, Any]] = None
    ) -> Dict[str, int]:
        """Count matching documents per distinct value of a field"""
        pipeline = [
            {"$match": match or {}},
            {"$group": {"_id": f"${field}", "count": {"$sum": 1}}}
        ]
        counts = {}
        async for row in self.db[collection].aggregate(pipeline):
            counts[str(row["_id"])] = row["count"]
        return counts

    # Scheme operations
    async def get_active_schemes(
        self,
        now: Optional[datetime] = None,
        scheme_type: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Active schemes whose application window has not closed, soonest deadline first"""
        query: Dict[str, Any] = {
            "is_active": True,
            "application_end_date": {"$gte": now or utc_now()}
        }
        if scheme_type:
            query["type"] = scheme_type
        return await self.find_many(
            SCHEMES,
            query,
            sort=[("application_end_date", ASCENDING), ("name", ASCENDING)]
        )

    # Statistics
    async def get_database_stats(self) -> Dict[str, Any]:
        """Get database statistics"""
        try:
            return {
                "total_users": await self.count(USERS),
                "total_students": await self.count(STUDENTS, {"is_active": True}),
                "total_teachers": await self.count(TEACHERS, {"is_active": True}),
                "total_institutions": await self.count(INSTITUTIONS, {"is_active": True}),
                "active_schemes": await self.count(SCHEMES, {"is_active": True}),
            }
        except Exception as e:
            logger.error(f"Failed to get database stats: {e}")
            return {}


# Global MongoDB service instance
mongo_service = MongoService()


def get_mongo_service() -> MongoService:
    """FastAPI dependency returning the shared MongoDB service"""
    return mongo_service