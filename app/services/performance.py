import logging
from typing import List

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.database import Database

from app.database import to_object_id, utcnow
from app.errors import NotFoundError, ValidationError
from app.schemas.performance import PerformanceCreate, PerformanceUpdate
from app.services.courses import get_student_user
from app.services.references import populate_performance

logger = logging.getLogger(__name__)


def _latest(db: Database, student_id) -> dict:
    snapshot = db.performance.find_one(
        {"student": to_object_id(student_id, "Student")},
        sort=[("date", DESCENDING), ("_id", DESCENDING)],
    )
    if not snapshot:
        raise NotFoundError("Performance data not found")
    return snapshot


def get_latest(db: Database, student_id) -> dict:
    return populate_performance(db, [_latest(db, student_id)])[0]


def create_snapshot(db: Database, student_id, teacher_id: str, payload: PerformanceCreate) -> dict:
    student = get_student_user(db, student_id)
    snapshot = payload.to_document()
    snapshot.update(student=student["_id"], teacher=ObjectId(teacher_id), date=utcnow())
    db.performance.insert_one(snapshot)
    logger.info(f"Recorded performance snapshot {snapshot['_id']} for student {student['_id']}")
    return snapshot


def update_latest(db: Database, student_id, payload: PerformanceUpdate) -> dict:
    snapshot = _latest(db, student_id)
    # Blank fields keep their stored values
    changes = {k: v for k, v in payload.changes().items() if v != ""}
    if not changes:
        raise ValidationError("No changes supplied")
    changes["date"] = utcnow()
    db.performance.update_one({"_id": snapshot["_id"]}, {"$set": changes})
    return populate_performance(db, [db.performance.find_one({"_id": snapshot["_id"]})])[0]


def history(db: Database, student_id) -> List[dict]:
    snapshots = list(
        db.performance
        .find({"student": to_object_id(student_id, "Student")})
        .sort([("date", DESCENDING), ("_id", DESCENDING)])
    )
    return populate_performance(db, snapshots)
