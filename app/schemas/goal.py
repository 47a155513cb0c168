from datetime import date
from typing import Literal, Optional

from pydantic import Field

from app.schemas.base import CamelModel

GoalStatus = Literal["pending", "in-progress", "completed"]


# --- Goals (embedded in students.goals) ---
class CreateGoal(CamelModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    target_date: Optional[date] = None
    status: GoalStatus = "pending"


class UpdateGoal(CamelModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    target_date: Optional[date] = None
    status: Optional[GoalStatus] = None
