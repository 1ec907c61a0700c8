from __future__ import annotations
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Response
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from ..auth import create_access_token, get_current_user, hash_password, verify_password
from ..config import ENVIRONMENT, JWT_EXPIRE_MINUTES, TOKEN_COOKIE_NAME
from ..database import create_document, get_db, serialize
from ..schemas import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _issue_session(response: Response, user_id: str) -> str:
    token = create_access_token(user_id)
    response.set_cookie(
        TOKEN_COOKIE_NAME,
        token,
        httponly=True,
        samesite="lax",
        secure=ENVIRONMENT == "production",
        max_age=JWT_EXPIRE_MINUTES * 60,
        path="/",
    )
    return token


def _public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    out = serialize(user)
    return {
        "id": out["id"],
        "username": out.get("username"),
        "email": out.get("email"),
        "role": out.get("role", "user"),
        "phone": out.get("phone", ""),
    }


@router.post("/register", status_code=201)
def register(payload: RegisterRequest, response: Response, db: Database = Depends(get_db)):
    email = payload.email.lower()
    if db["user"].find_one({"email": email}):
        raise HTTPException(status_code=409, detail="Email already registered")
    try:
        user_id = create_document(
            "user",
            {
                "username": payload.username.strip(),
                "email": email,
                "password": hash_password(payload.password),
                "role": "user",
            },
            db=db,
        )
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="Email already registered")

    logger.info(f"Registered user {user_id}")
    token = _issue_session(response, user_id)
    user = db["user"].find_one({"email": email})
    return {**_public_user(user), "token": token}


@router.post("/login")
def login(payload: LoginRequest, response: Response, db: Database = Depends(get_db)):
    user = db["user"].find_one({"email": payload.email.lower()})
    if not user or not verify_password(payload.password, user.get("password", "")):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = _issue_session(response, str(user["_id"]))
    return {**_public_user(user), "token": token}


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE_NAME, path="/")
    return {"message": "Logged out"}


@router.get("/profile")
def profile(user: Dict[str, Any] = Depends(get_current_user)):
    return _public_user(user)
