from typing import Literal

from pydantic import EmailStr, Field, field_validator

from app.schemas.base import CamelModel

Role = Literal["student", "teacher"]


# --- Users (users collection) ---
class RegisterUser(CamelModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Role = "student"

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class LoginUser(CamelModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()
