import logging
import os
from datetime import date, datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from app.errors import NotFoundError

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None


def get_client() -> MongoClient:
    global _client
    if _client is None:
        url = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
        logger.info("Creating MongoDB client")
        _client = MongoClient(url, serverSelectionTimeoutMS=5000, tz_aware=True)
    return _client


def get_db() -> Database:
    return get_client()[os.getenv("DATABASE_NAME", "student_success")]


def ensure_indexes(db: Database):
    db.users.create_index("email", unique=True)
    db.students.create_index("user", unique=True)
    db.students.create_index("studentId", unique=True)
    db.teachers.create_index("user", unique=True)
    db.courses.create_index("courseCode", unique=True)
    db.courses.create_index("instructor")
    db.performance.create_index([("student", ASCENDING), ("date", DESCENDING)])


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: Any, label: str = "Resource") -> ObjectId:
    """Parse an id from a path or body; anything malformed is reported as missing."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundError(f"{label} not found")


def serialize_doc(value: Any) -> Any:
    """Turn a stored document into JSON-ready data: `_id` becomes `id`, ObjectIds become strings."""
    if isinstance(value, dict):
        return {("id" if k == "_id" else k): serialize_doc(v) for k, v in value.items()}
    if isinstance(value, list):
        return [serialize_doc(v) for v in value]
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def serialize_list(docs: list) -> list:
    return [serialize_doc(d) for d in docs]
