from typing import Optional

from fastapi import APIRouter, Depends

from app.database import serialize_doc, serialize_list
from app.dependencies.auth import teacher_context, user_context
from app.errors import AuthorizationError
from app.schemas.course import AddStudentRequest, CommentCreate, CourseCreate, CoursePatch, EnrollRequest, GradeUpdate
from app.services import courses as course_service

router = APIRouter()


# -------- Courses --------
@router.post("", status_code=201)
def create_course(course: CourseCreate, context=Depends(teacher_context)):
    db = context["db"]
    user_id = context["user_id"]
    return serialize_doc(course_service.create_course(db, course, user_id))


@router.get("")
def get_all_courses(status: Optional[str] = None, context=Depends(user_context)):
    return serialize_list(course_service.list_courses(context["db"], status=status))


@router.get("/{course_id}")
def get_course_by_id(course_id: str, context=Depends(user_context)):
    return serialize_doc(course_service.get_course(context["db"], course_id))


@router.put("/{course_id}")
def update_course(course_id: str, patch: CoursePatch, context=Depends(teacher_context)):
    db = context["db"]
    user_id = context["user_id"]
    return serialize_doc(course_service.update_course(db, course_id, patch, user_id))


@router.delete("/{course_id}")
def delete_course(course_id: str, context=Depends(teacher_context)):
    course_service.delete_course(context["db"], course_id, context["user_id"])
    return {"message": "Course deleted successfully"}


# -------- Enrollment --------
@router.post("/{course_id}/enroll")
def enroll(course_id: str, request: Optional[EnrollRequest] = None, context=Depends(user_context)):
    db = context["db"]
    user_id = context["user_id"]

    # Students enroll themselves; teachers may enroll anyone
    student_id = (request.student_id if request else None) or user_id
    if context["role"] == "student" and student_id != user_id:
        raise AuthorizationError("Not authorized")

    return serialize_doc(course_service.enroll_student(db, course_id, student_id))


@router.delete("/{course_id}/enroll/{student_id}")
def unenroll(course_id: str, student_id: str, context=Depends(user_context)):
    db = context["db"]
    user_id = context["user_id"]

    if context["role"] == "student":
        if student_id != user_id:
            raise AuthorizationError("Not authorized")
    else:
        course_service.get_owned_course(db, course_id, user_id)

    return serialize_doc(course_service.unenroll_student(db, course_id, student_id))


@router.post("/{course_id}/students")
def add_student(course_id: str, request: AddStudentRequest, context=Depends(teacher_context)):
    course = course_service.add_student(
        context["db"],
        course_id,
        context["user_id"],
        student_id=request.student_id,
        student_email=request.student_email,
    )
    return serialize_doc(course)


# -------- Grades, comments & performance --------
@router.put("/{course_id}/students/{student_id}/grade")
def update_grade(course_id: str, student_id: str, payload: GradeUpdate, context=Depends(teacher_context)):
    course = course_service.set_grade(context["db"], course_id, student_id, payload.grade, context["user_id"])
    return serialize_doc(course)


@router.post("/{course_id}/students/{student_id}/comments")
def add_comment(course_id: str, student_id: str, payload: CommentCreate, context=Depends(teacher_context)):
    course = course_service.add_comment(context["db"], course_id, student_id, payload.text, context["user_id"])
    return serialize_doc(course)


@router.put("/{course_id}/students/{student_id}/comments/{comment_id}")
def update_comment(
    course_id: str,
    student_id: str,
    comment_id: str,
    payload: CommentCreate,
    context=Depends(teacher_context),
):
    course = course_service.update_comment(
        context["db"], course_id, student_id, comment_id, payload.text, context["user_id"]
    )
    return serialize_doc(course)


@router.get("/{course_id}/students/{student_id}/performance")
def get_student_performance(course_id: str, student_id: str, context=Depends(teacher_context)):
    view = course_service.student_performance(context["db"], course_id, student_id, context["user_id"])
    return serialize_doc(view)
