from datetime import date
from typing import List, Literal, Optional

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.goal import CreateGoal

Gender = Literal["male", "female", "other"]
LetterGrade = Literal["A", "B", "C", "D", "F", "W", "I"]


# --- Students ---
class Address(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class StudentCreate(CamelModel):
    user: Optional[str] = None  # users._id; defaults to the caller for students
    student_id: str = Field(..., min_length=1)
    date_of_birth: date
    gender: Gender
    address: Optional[Address] = None
    contact_number: str = Field(..., min_length=1)
    major: Optional[str] = None
    minor: Optional[str] = None
    current_semester: int = Field(1, ge=1, le=8)


class StudentPatch(CamelModel):
    student_id: Optional[str] = Field(None, min_length=1)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    address: Optional[Address] = None
    contact_number: Optional[str] = Field(None, min_length=1)
    major: Optional[str] = None
    minor: Optional[str] = None
    current_semester: Optional[int] = Field(None, ge=1, le=8)
    gpa: Optional[float] = Field(None, ge=0.0, le=4.0)


class StudentProfilePatch(CamelModel):
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    address: Optional[Address] = None
    contact_number: Optional[str] = Field(None, min_length=1)
    major: Optional[str] = None
    minor: Optional[str] = None
    current_semester: Optional[int] = Field(None, ge=1, le=8)
    goals: Optional[List[CreateGoal]] = None


# --- Course entries (embedded in students.courses) ---
class CourseEntryCreate(CamelModel):
    course: str
    semester: int = Field(..., ge=1, le=8)
    year: int = Field(..., ge=1900, le=2200)


class CourseGradeUpdate(CamelModel):
    grade: Optional[LetterGrade] = Field(...)
