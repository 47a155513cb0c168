import logging
from typing import List, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from app.database import to_object_id, utcnow
from app.errors import AuthorizationError, CapacityError, ConflictError, NotFoundError, ValidationError
from app.schemas.course import CourseCreate, CoursePatch
from app.services.references import populate_courses

logger = logging.getLogger(__name__)


# -------- Lookups --------

def get_course_or_404(db: Database, course_id) -> dict:
    course = db.courses.find_one({"_id": to_object_id(course_id, "Course")})
    if not course:
        raise NotFoundError("Course not found")
    return course


def get_owned_course(db: Database, course_id, user_id: str) -> dict:
    course = get_course_or_404(db, course_id)
    if str(course.get("instructor")) != user_id:
        logger.warning(f"User {user_id} is not the instructor of course {course['_id']}")
        raise AuthorizationError("Not authorized")
    return course


def get_student_user(db: Database, student_id=None, email: Optional[str] = None) -> dict:
    if email:
        query = {"email": email.lower(), "role": "student"}
    else:
        query = {"_id": to_object_id(student_id, "Student"), "role": "student"}
    student = db.users.find_one(query, {"passwordHash": 0})
    if not student:
        raise NotFoundError("Student not found")
    return student


def _prerequisite_ids(db: Database, ids: List[str], course_id: Optional[ObjectId] = None) -> List[ObjectId]:
    oids = list(dict.fromkeys(to_object_id(i, "Prerequisite course") for i in ids))
    if course_id is not None and course_id in oids:
        raise ValidationError("A course cannot be its own prerequisite")
    if oids and db.courses.count_documents({"_id": {"$in": oids}}) != len(oids):
        raise NotFoundError("Prerequisite course not found")
    return oids


# -------- CRUD --------

def create_course(db: Database, payload: CourseCreate, instructor_id: str) -> dict:
    course = payload.to_document()
    now = utcnow()
    course.update(
        prerequisites=_prerequisite_ids(db, payload.prerequisites),
        instructor=ObjectId(instructor_id),
        enrolledStudents=[],
        grades=[],
        comments=[],
        createdAt=now,
        updatedAt=now,
    )
    try:
        db.courses.insert_one(course)
    except DuplicateKeyError as e:
        raise ConflictError(f"Course {payload.course_code} already exists") from e
    logger.info(f"Created course {course['courseCode']} ({course['_id']}) for instructor {instructor_id}")
    return course


def list_courses(db: Database, status: Optional[str] = None, instructor_id: Optional[str] = None) -> List[dict]:
    query = {}
    if status:
        query["status"] = status
    if instructor_id:
        query["instructor"] = ObjectId(instructor_id)
    courses = list(db.courses.find(query).sort("courseCode", 1))
    return populate_courses(db, courses)


def get_course(db: Database, course_id) -> dict:
    course = get_course_or_404(db, course_id)
    return populate_courses(db, [course], include_students=True)[0]


def update_course(db: Database, course_id, patch: CoursePatch, user_id: str) -> dict:
    course = get_owned_course(db, course_id, user_id)
    changes = patch.changes()
    if not changes:
        raise ValidationError("No changes supplied")

    if "prerequisites" in changes:
        changes["prerequisites"] = _prerequisite_ids(db, changes["prerequisites"], course["_id"])
    if "capacity" in changes and changes["capacity"] < len(course.get("enrolledStudents", [])):
        raise ValidationError("Capacity cannot be lower than the number of enrolled students")

    changes["updatedAt"] = utcnow()
    query = {"_id": course["_id"]}
    if "capacity" in changes:
        # The roster must still fit when the write lands
        query[f"enrolledStudents.{changes['capacity']}"] = {"$exists": False}
    try:
        updated = db.courses.find_one_and_update(
            query,
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError as e:
        raise ConflictError(f"Course {changes.get('courseCode')} already exists") from e
    if not updated:
        get_course_or_404(db, course["_id"])
        raise ValidationError("Capacity cannot be lower than the number of enrolled students")
    return updated


def delete_course(db: Database, course_id, user_id: str):
    course = get_owned_course(db, course_id, user_id)
    db.courses.delete_one({"_id": course["_id"]})

    # Student.courses entries are left pointing at the deleted course
    dangling = db.students.count_documents({"courses.course": course["_id"]})
    if dangling:
        logger.warning(f"Deleted course {course['_id']} is still referenced by {dangling} student record(s)")
    logger.info(f"Deleted course {course['courseCode']} ({course['_id']})")


# -------- Roster --------

def _push_to_roster(db: Database, course: dict, student_id: ObjectId):
    roster = course.get("enrolledStudents", [])
    if student_id in roster:
        raise ConflictError("Student already enrolled")
    capacity = course["capacity"]
    if len(roster) >= capacity:
        raise CapacityError("Course is full")

    # Guarded push: capacity unchanged, the student still absent and slot `capacity - 1` still free
    result = db.courses.update_one(
        {
            "_id": course["_id"],
            "capacity": capacity,
            "enrolledStudents": {"$ne": student_id},
            f"enrolledStudents.{capacity - 1}": {"$exists": False},
        },
        {"$push": {"enrolledStudents": student_id}, "$set": {"updatedAt": utcnow()}},
    )
    if result.matched_count == 0:
        current = get_course_or_404(db, course["_id"])
        if student_id in current.get("enrolledStudents", []):
            raise ConflictError("Student already enrolled")
        if len(current.get("enrolledStudents", [])) < current["capacity"]:
            # Capacity changed under us; retry against the fresh read
            return _push_to_roster(db, current, student_id)
        raise CapacityError("Course is full")


def enroll_student(db: Database, course_id, student_id) -> dict:
    course = get_course_or_404(db, course_id)
    student = get_student_user(db, student_id)
    _push_to_roster(db, course, student["_id"])
    logger.info(f"Enrolled student {student['_id']} in course {course['_id']}")
    return get_course_or_404(db, course["_id"])


def unenroll_student(db: Database, course_id, student_id) -> dict:
    course = get_course_or_404(db, course_id)
    student_oid = to_object_id(student_id, "Student")
    if student_oid in course.get("enrolledStudents", []):
        db.courses.update_one(
            {"_id": course["_id"]},
            {"$pull": {"enrolledStudents": student_oid}, "$set": {"updatedAt": utcnow()}},
        )
        logger.info(f"Removed student {student_oid} from course {course['_id']}")
    return get_course_or_404(db, course["_id"])


def add_student(db: Database, course_id, user_id: str, student_id=None, student_email=None) -> dict:
    """Enroll a student on behalf of the instructor and open their grade record."""
    course = get_owned_course(db, course_id, user_id)
    student = get_student_user(db, student_id, email=student_email)

    enrolled = student["_id"] in course.get("enrolledStudents", [])
    has_grade = any(g.get("student") == student["_id"] for g in course.get("grades", []))
    if enrolled and has_grade:
        raise ConflictError("Student already enrolled")

    if not enrolled:
        _push_to_roster(db, course, student["_id"])
    if not has_grade:
        db.courses.update_one(
            {"_id": course["_id"], "grades.student": {"$ne": student["_id"]}},
            {"$push": {"grades": {"_id": ObjectId(), "student": student["_id"], "grade": None, "date": utcnow()}}},
        )
    logger.info(f"Added student {student['_id']} to course {course['_id']}")
    return get_course_or_404(db, course["_id"])


# -------- Grades & comments --------

def set_grade(db: Database, course_id, student_id, grade: Optional[float], user_id: str) -> dict:
    course = get_owned_course(db, course_id, user_id)
    student_oid = to_object_id(student_id, "Student")
    now = utcnow()
    result = db.courses.update_one(
        {"_id": course["_id"], "grades.student": student_oid},
        {"$set": {"grades.$.grade": grade, "grades.$.date": now, "updatedAt": now}},
    )
    if result.matched_count == 0:
        raise NotFoundError("Student not found in course")
    logger.info(f"Set grade {grade} for student {student_oid} in course {course['_id']}")
    return get_course_or_404(db, course["_id"])


def add_comment(db: Database, course_id, student_id, text: str, user_id: str) -> dict:
    course = get_owned_course(db, course_id, user_id)
    student = get_student_user(db, student_id)
    now = utcnow()
    comment = {"_id": ObjectId(), "student": student["_id"], "text": text, "date": now}
    db.courses.update_one(
        {"_id": course["_id"]},
        {"$push": {"comments": comment}, "$set": {"updatedAt": now}},
    )
    return get_course_or_404(db, course["_id"])


def update_comment(db: Database, course_id, student_id, comment_id, text: str, user_id: str) -> dict:
    course = get_owned_course(db, course_id, user_id)
    student_oid = to_object_id(student_id, "Student")
    comment_oid = to_object_id(comment_id, "Comment")
    if not any(c["_id"] == comment_oid and c.get("student") == student_oid for c in course.get("comments", [])):
        raise NotFoundError("Comment not found")

    now = utcnow()
    result = db.courses.update_one(
        {"_id": course["_id"], "comments._id": comment_oid},
        {"$set": {"comments.$.text": text, "comments.$.date": now, "updatedAt": now}},
    )
    if result.matched_count == 0:
        raise NotFoundError("Comment not found")
    return get_course_or_404(db, course["_id"])


def student_performance(db: Database, course_id, student_id, user_id: str) -> dict:
    course = get_owned_course(db, course_id, user_id)
    student_oid = to_object_id(student_id, "Student")
    return {
        "grades": [
            {"grade": g.get("grade"), "date": g.get("date")}
            for g in course.get("grades", [])
            if g.get("student") == student_oid
        ],
        "comments": [
            {"_id": c["_id"], "text": c.get("text"), "date": c.get("date")}
            for c in course.get("comments", [])
            if c.get("student") == student_oid
        ],
    }
