"""
Explicit joins for documents that point at each other by ObjectId.

Each helper takes already-loaded documents, fetches every referenced document
in one query per collection, and swaps the ids for the documents in place.
Missing targets resolve to None for single references and are dropped from
reference lists.
"""

from typing import Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo.collection import Collection
from pymongo.database import Database

USER_FIELDS = {"firstName": 1, "lastName": 1, "email": 1}
COURSE_SUMMARY_FIELDS = {"grades": 0, "comments": 0, "enrolledStudents": 0}


def _fetch_by_id(collection: Collection, ids: Iterable[Optional[ObjectId]], projection=None) -> Dict[ObjectId, dict]:
    wanted = list({i for i in ids if i is not None})
    if not wanted:
        return {}
    return {doc["_id"]: doc for doc in collection.find({"_id": {"$in": wanted}}, projection)}


def populate_courses(db: Database, courses: List[dict], include_students: bool = False) -> List[dict]:
    instructors = _fetch_by_id(db.users, (c.get("instructor") for c in courses), USER_FIELDS)
    prerequisites = _fetch_by_id(
        db.courses,
        (p for c in courses for p in c.get("prerequisites", [])),
        COURSE_SUMMARY_FIELDS,
    )
    students = {}
    if include_students:
        students = _fetch_by_id(db.users, (s for c in courses for s in c.get("enrolledStudents", [])), USER_FIELDS)

    for course in courses:
        course["instructor"] = instructors.get(course.get("instructor"))
        course["prerequisites"] = [prerequisites[p] for p in course.get("prerequisites", []) if p in prerequisites]
        if include_students:
            course["enrolledStudents"] = [students[s] for s in course.get("enrolledStudents", []) if s in students]
    return courses


def populate_students(db: Database, students: List[dict]) -> List[dict]:
    users = _fetch_by_id(db.users, (s.get("user") for s in students), USER_FIELDS)
    courses = _fetch_by_id(
        db.courses,
        (entry.get("course") for s in students for entry in s.get("courses", [])),
        COURSE_SUMMARY_FIELDS,
    )
    for student in students:
        student["user"] = users.get(student.get("user"))
        for entry in student.get("courses", []):
            entry["course"] = courses.get(entry.get("course"))
    return students


def populate_performance(db: Database, snapshots: List[dict]) -> List[dict]:
    users = _fetch_by_id(
        db.users,
        (ref for s in snapshots for ref in (s.get("student"), s.get("teacher"))),
        USER_FIELDS,
    )
    for snapshot in snapshots:
        snapshot["student"] = users.get(snapshot.get("student"))
        snapshot["teacher"] = users.get(snapshot.get("teacher"))
    return snapshots
