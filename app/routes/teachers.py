from fastapi import APIRouter, Depends

from app.database import serialize_doc, serialize_list
from app.dependencies.auth import teacher_context
from app.schemas.teacher import TeacherProfile
from app.services import courses as course_service
from app.services import teachers as teacher_service
from app.services.users import public_user

router = APIRouter()


@router.get("/profile")
def get_teacher_profile(context=Depends(teacher_context)):
    profile = teacher_service.get_profile(context["db"], context["user_id"])
    return {"user": public_user(context["user"]), "profile": serialize_doc(profile)}


@router.post("/profile", status_code=201)
def create_teacher_profile(profile: TeacherProfile, context=Depends(teacher_context)):
    db = context["db"]
    user_id = context["user_id"]
    return serialize_doc(teacher_service.create_profile(db, user_id, profile))


@router.put("/profile")
def update_teacher_profile(profile: TeacherProfile, context=Depends(teacher_context)):
    db = context["db"]
    user_id = context["user_id"]
    return serialize_doc(teacher_service.update_profile(db, user_id, profile))


@router.get("/courses")
def get_teacher_courses(context=Depends(teacher_context)):
    courses = course_service.list_courses(context["db"], instructor_id=context["user_id"])
    return serialize_list(courses)
