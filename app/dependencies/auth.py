from datetime import timedelta
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, Header
from pymongo.database import Database
import jwt
import logging
import os

from app.database import get_db, utcnow
from app.errors import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
DEV_SECRET = "dev-secret-change-me"


def _jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET")
    if not secret:
        logger.warning("JWT_SECRET not set, signing tokens with the development secret")
        return DEV_SECRET
    return secret


def create_access_token(user: dict) -> str:
    minutes = int(os.getenv("JWT_EXPIRES_MINUTES", "600"))
    claims = {
        "sub": str(user["_id"]),
        "role": user["role"],
        "exp": utcnow() + timedelta(minutes=minutes),
    }
    return jwt.encode(claims, _jwt_secret(), algorithm=JWT_ALGORITHM)


def _read_token(x_auth_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
    if x_auth_token:
        return x_auth_token
    if authorization and authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1]
    return None


def user_context(
    x_auth_token: Optional[str] = Header(None),
    authorization: Optional[str] = Header(None),
    db: Database = Depends(get_db),
):
    token = _read_token(x_auth_token, authorization)
    if not token:
        raise AuthenticationError("No token, authorization denied")

    try:
        payload = jwt.decode(token, _jwt_secret(), algorithms=[JWT_ALGORITHM])
        user_id = ObjectId(payload.get("sub"))
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Session expired")
    except (jwt.InvalidTokenError, InvalidId, TypeError) as e:
        logger.warning(f"Rejected token: {e}")
        raise AuthenticationError("Token is not valid")

    user = db.users.find_one({"_id": user_id}, {"passwordHash": 0})
    if not user:
        logger.warning(f"Token for unknown user {user_id}")
        raise AuthenticationError("Token is not valid")

    return {
        "db": db,
        "user_id": str(user["_id"]),
        "role": user["role"],
        "user": user,
    }


def require_role(role: str):
    def role_context(context=Depends(user_context)):
        if context["role"] != role:
            logger.warning(f"User {context['user_id']} ({context['role']}) denied {role}-only route")
            raise AuthorizationError("Not authorized")
        return context

    return role_context


teacher_context = require_role("teacher")
student_context = require_role("student")
