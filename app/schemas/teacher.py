from typing import Optional

from app.schemas.base import CamelModel


# --- Teacher profiles (teachers.user -> users._id) ---
class TeacherProfile(CamelModel):
    department: Optional[str] = None
    title: Optional[str] = None
    phone: Optional[str] = None
    office_hours: Optional[str] = None
    bio: Optional[str] = None
