import logging

from passlib.context import CryptContext
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from app.database import serialize_doc, utcnow
from app.errors import AuthenticationError, ConflictError
from app.schemas.auth import RegisterUser

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def public_user(user: dict) -> dict:
    return serialize_doc({k: v for k, v in user.items() if k != "passwordHash"})


def register_user(db: Database, payload: RegisterUser) -> dict:
    now = utcnow()
    user = payload.to_document(exclude={"password"})
    user.update(passwordHash=hash_password(payload.password), createdAt=now, updatedAt=now)
    try:
        db.users.insert_one(user)
    except DuplicateKeyError as e:
        raise ConflictError("User already exists") from e
    logger.info(f"Registered {user['role']} {user['_id']}")
    return user


def authenticate(db: Database, email: str, password: str) -> dict:
    user = db.users.find_one({"email": email})
    if not user or not verify_password(password, user.get("passwordHash", "")):
        logger.warning(f"Failed login for {email}")
        raise AuthenticationError("Invalid credentials")
    return user
