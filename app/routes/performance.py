from fastapi import APIRouter, Depends

from app.database import serialize_doc, serialize_list
from app.dependencies.auth import teacher_context, user_context
from app.errors import AuthorizationError
from app.schemas.performance import PerformanceCreate, PerformanceUpdate
from app.services import performance as performance_service

router = APIRouter()


def _check_reader(context: dict, student_id: str):
    # Students only see their own snapshots
    if context["role"] == "student" and student_id != context["user_id"]:
        raise AuthorizationError("Not authorized")


@router.get("/student/{student_id}")
def get_performance(student_id: str, context=Depends(user_context)):
    _check_reader(context, student_id)
    return serialize_doc(performance_service.get_latest(context["db"], student_id))


@router.post("/student/{student_id}", status_code=201)
def create_performance(student_id: str, payload: PerformanceCreate, context=Depends(teacher_context)):
    db = context["db"]
    user_id = context["user_id"]
    return serialize_doc(performance_service.create_snapshot(db, student_id, user_id, payload))


@router.put("/student/{student_id}")
def update_performance(student_id: str, payload: PerformanceUpdate, context=Depends(teacher_context)):
    return serialize_doc(performance_service.update_latest(context["db"], student_id, payload))


@router.get("/history/{student_id}")
def get_performance_history(student_id: str, context=Depends(user_context)):
    _check_reader(context, student_id)
    return serialize_list(performance_service.history(context["db"], student_id))
