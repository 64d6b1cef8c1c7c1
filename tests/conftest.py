# tests/conftest.py
# Shared fixtures: an in-memory MongoService double, a TestClient and token helpers

import copy
import re
from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

from app.main import app
from app.services.auth_service import create_access_token
from app.services.mongo_service import (
    INSTITUTIONS,
    SCHEMES,
    STUDENTS,
    TEACHERS,
    USERS,
    get_mongo_service,
    utc_now,
)

UNIQUE_FIELDS = {
    USERS: ("email",),
    STUDENTS: ("email", "apaar_id", "enrollment_number"),
    TEACHERS: ("email", "apar_id"),
    INSTITUTIONS: ("aishe_code",),
    SCHEMES: ("name",),
}


def _compare(value, operator, operand):
    if operator == "$in":
        return value in operand
    if value is None:
        return False
    if operator == "$gte":
        return value >= operand
    if operator == "$gt":
        return value > operand
    if operator == "$lte":
        return value <= operand
    if operator == "$lt":
        return value < operand
    if operator == "$ne":
        return value != operand
    raise NotImplementedError(operator)


def matches(doc, query):
    """Evaluate the subset of the MongoDB query language the API uses"""
    for key, condition in query.items():
        if key == "$or":
            if not any(matches(doc, sub) for sub in condition):
                return False
            continue

        value = doc.get(key)
        if isinstance(condition, dict) and any(op.startswith("$") for op in condition):
            if "$regex" in condition:
                flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
                if value is None or not re.search(condition["$regex"], str(value), flags):
                    return False
            for operator, operand in condition.items():
                if operator in ("$regex", "$options"):
                    continue
                if not _compare(value, operator, operand):
                    return False
        elif value != condition:
            return False
    return True


def _sort(docs, sort):
    for field, direction in reversed(list(sort or [])):
        docs.sort(
            key=lambda d: (d.get(field) is not None, d.get(field) if d.get(field) is not None else 0),
            reverse=direction < 0,
        )
    return docs


class FakeMongoService:
    """In-memory stand-in exposing the same coroutine API as MongoService"""

    def __init__(self):
        self.collections = {name: [] for name in UNIQUE_FIELDS}
        self.healthy = True

    async def connect(self):
        pass

    async def close(self):
        pass

    async def setup_indexes(self):
        pass

    async def health_check(self):
        return self.healthy

    def _check_unique(self, collection, doc, exclude_id=None):
        for field in UNIQUE_FIELDS.get(collection, ()):
            if doc.get(field) is None:
                continue
            for other in self.collections[collection]:
                if other["_id"] != exclude_id and other.get(field) == doc[field]:
                    raise DuplicateKeyError(f"E11000 duplicate key error collection: {collection} {field}")

    def seed(self, collection, **fields):
        """Store a document directly and return its id as a string"""
        doc = {"_id": ObjectId(), "created_at": utc_now(), "updated_at": utc_now(), **fields}
        self._check_unique(collection, doc)
        self.collections[collection].append(doc)
        return str(doc["_id"])

    def _get(self, collection, doc_id):
        for doc in self.collections[collection]:
            if doc["_id"] == ObjectId(doc_id):
                return doc
        return None

    async def insert_one(self, collection, document):
        now = utc_now()
        doc = {**copy.deepcopy(document), "created_at": now, "updated_at": now, "_id": ObjectId()}
        self._check_unique(collection, doc)
        self.collections[collection].append(doc)
        return copy.deepcopy(doc)

    async def find_by_id(self, collection, doc_id):
        return copy.deepcopy(self._get(collection, doc_id))

    async def find_one(self, collection, query):
        for doc in self.collections[collection]:
            if matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def find_many(self, collection, query, sort=None, limit=0):
        docs = [copy.deepcopy(d) for d in self.collections[collection] if matches(d, query)]
        docs = _sort(docs, sort)
        return docs[:limit] if limit else docs

    async def update_by_id(self, collection, doc_id, fields):
        doc = self._get(collection, doc_id)
        if doc is None:
            return None
        updated = {**doc, **copy.deepcopy(fields), "updated_at": utc_now()}
        self._check_unique(collection, updated, exclude_id=doc["_id"])
        doc.update(updated)
        return copy.deepcopy(doc)

    async def push_by_id(self, collection, doc_id, field, item, extra_fields=None):
        doc = self._get(collection, doc_id)
        if doc is None:
            return None
        doc.setdefault(field, []).append(copy.deepcopy(item))
        doc.update({**(extra_fields or {}), "updated_at": utc_now()})
        return copy.deepcopy(doc)

    async def delete_by_id(self, collection, doc_id):
        doc = self._get(collection, doc_id)
        if doc is None:
            return False
        self.collections[collection].remove(doc)
        return True

    async def count(self, collection, query=None):
        return sum(1 for d in self.collections[collection] if matches(d, query or {}))

    async def average(self, collection, field, match=None):
        values = [
            d[field] for d in self.collections[collection]
            if matches(d, match or {}) and isinstance(d.get(field), (int, float))
        ]
        return sum(values) / len(values) if values else None

    async def group_count(self, collection, field, match=None):
        counts = {}
        for doc in self.collections[collection]:
            if matches(doc, match or {}):
                key = str(doc.get(field))
                counts[key] = counts.get(key, 0) + 1
        return counts

    async def get_active_schemes(self, now=None, scheme_type=None):
        query = {"is_active": True, "application_end_date": {"$gte": now or utc_now()}}
        if scheme_type:
            query["type"] = scheme_type
        return await self.find_many(
            SCHEMES, query, sort=[("application_end_date", 1), ("name", 1)]
        )

    async def get_database_stats(self):
        return {
            "total_users": await self.count(USERS),
            "total_students": await self.count(STUDENTS, {"is_active": True}),
            "total_teachers": await self.count(TEACHERS, {"is_active": True}),
            "total_institutions": await self.count(INSTITUTIONS, {"is_active": True}),
            "active_schemes": await self.count(SCHEMES, {"is_active": True}),
        }


def scheme_document(name, **overrides):
    """A valid, active scheme document closing in 30 days"""
    doc = {
        "name": name,
        "description": f"{name} description",
        "type": "Scholarship",
        "department": "Ministry of Education",
        "level": "Central",
        "category": "Merit Based",
        "is_active": True,
        "application_end_date": datetime.now(timezone.utc) + timedelta(days=30),
        "eligibility_criteria": {
            "min_cgpa": 6,
            "max_cgpa": 10,
            "min_attendance": 75,
            "courses": [],
            "semesters": [],
        },
    }
    doc.update(overrides)
    return doc


@pytest.fixture
def fake_mongo():
    return FakeMongoService()


@pytest.fixture
def client(fake_mongo):
    app.dependency_overrides[get_mongo_service] = lambda: fake_mongo
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(fake_mongo):
    """Factory: seed an active user with a role and return bearer headers"""

    def make(role="admin", **fields):
        user = {
            "name": f"{role.title()} User",
            "email": f"{role}-{ObjectId()}@example.com",
            "password": "not-a-real-hash",
            "role": role,
            "is_active": True,
            **fields,
        }
        user_id = fake_mongo.seed(USERS, **user)
        return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}

    return make


@pytest.fixture
def admin_headers(auth_headers):
    return auth_headers("admin")
