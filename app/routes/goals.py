from fastapi import APIRouter, Depends

from app.database import serialize_doc
from app.dependencies.auth import student_context
from app.schemas.goal import CreateGoal, UpdateGoal
from app.services import students as student_service

router = APIRouter()


@router.post("", status_code=201)
def create_goal(goal: CreateGoal, context=Depends(student_context)):
    db = context["db"]
    user_id = context["user_id"]
    return serialize_doc(student_service.add_goal(db, user_id, goal))


@router.put("/{goal_id}")
def update_goal(goal_id: str, goal: UpdateGoal, context=Depends(student_context)):
    db = context["db"]
    user_id = context["user_id"]
    return serialize_doc(student_service.update_goal(db, user_id, goal_id, goal))
