from typing import List, Optional

from pydantic import Field

from app.schemas.base import CamelModel


# --- Performance snapshots ---
class PerformanceCreate(CamelModel):
    subjects: List[str] = Field(..., min_length=1)
    grades: List[str]
    comments: str = Field(..., min_length=1)
    semester: str = "Current"


class PerformanceUpdate(CamelModel):
    subjects: Optional[List[str]] = None
    grades: Optional[List[str]] = None
    comments: Optional[str] = None
    semester: Optional[str] = None
