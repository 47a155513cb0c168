import logging
from typing import List, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from app.database import to_object_id, utcnow
from app.errors import ConflictError, NotFoundError, ValidationError
from app.schemas.goal import CreateGoal, UpdateGoal
from app.schemas.student import CourseEntryCreate, StudentCreate, StudentPatch, StudentProfilePatch
from app.services.references import populate_students

logger = logging.getLogger(__name__)


def get_student_or_404(db: Database, student_id) -> dict:
    student = db.students.find_one({"_id": to_object_id(student_id, "Student")})
    if not student:
        raise NotFoundError("Student not found")
    return student


def get_profile_or_404(db: Database, user_id: str) -> dict:
    student = db.students.find_one({"user": ObjectId(user_id)})
    if not student:
        raise NotFoundError("Student profile not found")
    return student


def _new_goal(goal: CreateGoal) -> dict:
    return {"_id": ObjectId(), **goal.to_document()}


def _apply(db: Database, student_id: ObjectId, changes: dict) -> dict:
    if not changes:
        raise ValidationError("No changes supplied")
    changes["updatedAt"] = utcnow()
    try:
        updated = db.students.find_one_and_update(
            {"_id": student_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError as e:
        raise ConflictError("Student ID already in use") from e
    if not updated:
        raise NotFoundError("Student not found")
    return updated


# -------- Reads --------

def list_students(db: Database) -> List[dict]:
    students = list(db.students.find().sort("studentId", 1))
    return populate_students(db, students)


def get_student(db: Database, student_id) -> dict:
    return populate_students(db, [get_student_or_404(db, student_id)])[0]


def get_profile(db: Database, user_id: str) -> dict:
    return populate_students(db, [get_profile_or_404(db, user_id)])[0]


def get_profile_courses(db: Database, user_id: str) -> List[dict]:
    return get_profile(db, user_id).get("courses", [])


# -------- Writes --------

def create_student(db: Database, payload: StudentCreate, user_id) -> dict:
    user_oid = to_object_id(user_id, "User")
    user = db.users.find_one({"_id": user_oid})
    if not user:
        raise NotFoundError("User not found")
    if user["role"] != "student":
        raise ValidationError("User is not a student")

    now = utcnow()
    student = payload.to_document(exclude={"user"})
    student.update(
        user=user_oid,
        enrollmentDate=now,
        gpa=0.0,
        courses=[],
        goals=[],
        createdAt=now,
        updatedAt=now,
    )
    try:
        db.students.insert_one(student)
    except DuplicateKeyError as e:
        raise ConflictError("Student profile already exists") from e
    logger.info(f"Created student profile {student['_id']} for user {user_oid}")
    return student


def update_student(db: Database, student_id, patch: StudentPatch) -> dict:
    return _apply(db, to_object_id(student_id, "Student"), patch.changes())


def update_profile(db: Database, user_id: str, patch: StudentProfilePatch) -> dict:
    student = get_profile_or_404(db, user_id)
    changes = patch.changes()
    if patch.goals is not None:
        changes["goals"] = [_new_goal(goal) for goal in patch.goals]
    return _apply(db, student["_id"], changes)


def delete_student(db: Database, student_id):
    result = db.students.delete_one({"_id": to_object_id(student_id, "Student")})
    if result.deleted_count == 0:
        raise NotFoundError("Student not found")
    logger.info(f"Deleted student profile {student_id}")


# -------- Course entries --------

def add_course(db: Database, student_id, entry: CourseEntryCreate) -> dict:
    student = get_student_or_404(db, student_id)
    course_oid = to_object_id(entry.course, "Course")
    if not db.courses.find_one({"_id": course_oid}, {"_id": 1}):
        raise NotFoundError("Course not found")

    for existing in student.get("courses", []):
        if (existing.get("course"), existing.get("semester"), existing.get("year")) == (course_oid, entry.semester, entry.year):
            raise ConflictError("Course already added for this term")

    db.students.update_one(
        {"_id": student["_id"]},
        {
            "$push": {"courses": {"_id": ObjectId(), "course": course_oid, "grade": None,
                                  "semester": entry.semester, "year": entry.year}},
            "$set": {"updatedAt": utcnow()},
        },
    )
    return get_student_or_404(db, student["_id"])


def set_course_grade(db: Database, student_id, entry_id, grade: Optional[str]) -> dict:
    student = get_student_or_404(db, student_id)
    result = db.students.update_one(
        {"_id": student["_id"], "courses._id": to_object_id(entry_id, "Course")},
        {"$set": {"courses.$.grade": grade, "updatedAt": utcnow()}},
    )
    if result.matched_count == 0:
        raise NotFoundError("Course not found")
    logger.info(f"Set letter grade {grade} on course entry {entry_id} for student {student['_id']}")
    return get_student_or_404(db, student["_id"])


# -------- Goals --------

def add_goal(db: Database, user_id: str, goal: CreateGoal) -> dict:
    student = get_profile_or_404(db, user_id)
    db.students.update_one(
        {"_id": student["_id"]},
        {"$push": {"goals": _new_goal(goal)}, "$set": {"updatedAt": utcnow()}},
    )
    return get_student_or_404(db, student["_id"])


def update_goal(db: Database, user_id: str, goal_id, patch: UpdateGoal) -> dict:
    student = get_profile_or_404(db, user_id)
    changes = {f"goals.$.{field}": value for field, value in patch.changes().items()}
    if not changes:
        raise ValidationError("No changes supplied")
    changes["updatedAt"] = utcnow()
    result = db.students.update_one(
        {"_id": student["_id"], "goals._id": to_object_id(goal_id, "Goal")},
        {"$set": changes},
    )
    if result.matched_count == 0:
        raise NotFoundError("Goal not found")
    return get_student_or_404(db, student["_id"])
