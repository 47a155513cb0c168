import logging

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from app.database import utcnow
from app.errors import ConflictError, ValidationError
from app.schemas.teacher import TeacherProfile

logger = logging.getLogger(__name__)


def get_profile(db: Database, user_id: str):
    return db.teachers.find_one({"user": ObjectId(user_id)})


def create_profile(db: Database, user_id: str, payload: TeacherProfile) -> dict:
    now = utcnow()
    profile = payload.to_document()
    profile.update(user=ObjectId(user_id), createdAt=now, updatedAt=now)
    try:
        db.teachers.insert_one(profile)
    except DuplicateKeyError as e:
        raise ConflictError("Teacher profile already exists") from e
    logger.info(f"Created teacher profile for user {user_id}")
    return profile


def update_profile(db: Database, user_id: str, payload: TeacherProfile) -> dict:
    changes = payload.changes()
    if not changes:
        raise ValidationError("No changes supplied")
    now = utcnow()
    changes["updatedAt"] = now
    return db.teachers.find_one_and_update(
        {"user": ObjectId(user_id)},
        {"$set": changes, "$setOnInsert": {"createdAt": now}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
