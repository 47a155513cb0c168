from fastapi import APIRouter, Depends

from app.database import serialize_doc, serialize_list
from app.dependencies.auth import student_context, teacher_context, user_context
from app.errors import AuthorizationError, ValidationError
from app.schemas.student import CourseEntryCreate, CourseGradeUpdate, StudentCreate, StudentPatch, StudentProfilePatch
from app.services import students as student_service

router = APIRouter()


# -------- Own profile (students) --------
@router.get("/profile")
def get_my_profile(context=Depends(student_context)):
    return serialize_doc(student_service.get_profile(context["db"], context["user_id"]))


@router.put("/profile")
def update_my_profile(profile: StudentProfilePatch, context=Depends(student_context)):
    db = context["db"]
    user_id = context["user_id"]
    return serialize_doc(student_service.update_profile(db, user_id, profile))


@router.get("/courses")
def get_my_courses(context=Depends(student_context)):
    return serialize_list(student_service.get_profile_courses(context["db"], context["user_id"]))


# -------- Students --------
@router.get("")
def get_all_students(context=Depends(user_context)):
    return serialize_list(student_service.list_students(context["db"]))


@router.get("/{student_id}")
def get_student_by_id(student_id: str, context=Depends(user_context)):
    return serialize_doc(student_service.get_student(context["db"], student_id))


@router.post("", status_code=201)
def create_student(student: StudentCreate, context=Depends(user_context)):
    db = context["db"]
    user_id = context["user_id"]

    # Students may only create their own profile; teachers must name the user
    if context["role"] == "student":
        if student.user and student.user != user_id:
            raise AuthorizationError("Not authorized")
        owner = user_id
    else:
        if not student.user:
            raise ValidationError("user is required")
        owner = student.user

    return serialize_doc(student_service.create_student(db, student, owner))


@router.put("/{student_id}")
def update_student(student_id: str, student: StudentPatch, context=Depends(teacher_context)):
    return serialize_doc(student_service.update_student(context["db"], student_id, student))


@router.delete("/{student_id}")
def delete_student(student_id: str, context=Depends(teacher_context)):
    student_service.delete_student(context["db"], student_id)
    return {"message": "Student deleted successfully"}


# -------- Course entries --------
@router.post("/{student_id}/courses")
def add_course(student_id: str, entry: CourseEntryCreate, context=Depends(teacher_context)):
    return serialize_doc(student_service.add_course(context["db"], student_id, entry))


@router.put("/{student_id}/courses/{entry_id}")
def update_course_grade(student_id: str, entry_id: str, payload: CourseGradeUpdate, context=Depends(teacher_context)):
    student = student_service.set_course_grade(context["db"], student_id, entry_id, payload.grade)
    return serialize_doc(student)
