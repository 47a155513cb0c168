from fastapi import APIRouter, Depends
from pymongo.database import Database

from app.database import get_db
from app.dependencies.auth import create_access_token, user_context
from app.schemas.auth import LoginUser, RegisterUser
from app.services.users import authenticate, public_user, register_user

router = APIRouter()


@router.post("/register", status_code=201)
def register(payload: RegisterUser, db: Database = Depends(get_db)):
    user = register_user(db, payload)
    return {"token": create_access_token(user), "user": public_user(user)}


@router.post("/login")
def login(payload: LoginUser, db: Database = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)
    return {"token": create_access_token(user), "user": public_user(user)}


@router.get("/me")
def get_me(context=Depends(user_context)):
    return public_user(context["user"])
