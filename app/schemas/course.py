from datetime import datetime
from typing import Annotated, List, Literal, Optional

from pydantic import AliasChoices, EmailStr, Field, StringConstraints, model_validator

from app.schemas.base import CamelModel

Weekday = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
CourseStatus = Literal["active", "inactive", "completed"]
CourseCode = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


# --- Courses ---
class Schedule(CamelModel):
    day: Weekday
    start_time: str = Field(..., min_length=1)
    end_time: str = Field(..., min_length=1)
    room: str = Field(..., min_length=1)


class CourseCreate(CamelModel):
    course_code: CourseCode
    title: Title
    description: str = ""
    credits: int = Field(..., ge=1, le=6)
    semester: int = Field(1, ge=1, le=8)
    capacity: int = Field(..., ge=1)
    schedule: Schedule
    prerequisites: List[str] = Field(default_factory=list)
    status: CourseStatus = "active"
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class CoursePatch(CamelModel):
    course_code: Optional[CourseCode] = None
    title: Optional[Title] = None
    description: Optional[str] = None
    credits: Optional[int] = Field(None, ge=1, le=6)
    semester: Optional[int] = Field(None, ge=1, le=8)
    capacity: Optional[int] = Field(None, ge=1)
    schedule: Optional[Schedule] = None
    prerequisites: Optional[List[str]] = None
    status: Optional[CourseStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


# --- Roster ---
class EnrollRequest(CamelModel):
    student_id: Optional[str] = None


class AddStudentRequest(CamelModel):
    student_id: Optional[str] = None
    student_email: Optional[EmailStr] = None

    @model_validator(mode="after")
    def check_identifier(self):
        if not self.student_id and not self.student_email:
            raise ValueError("studentId or studentEmail is required")
        return self


# --- Grades & comments ---
class GradeUpdate(CamelModel):
    grade: Optional[float] = Field(..., ge=0, le=100)


class CommentCreate(CamelModel):
    text: str = Field(..., min_length=1, validation_alias=AliasChoices("text", "comment"))
