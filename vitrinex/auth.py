from __future__ import annotations
import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from bson import ObjectId
from fastapi import Depends, HTTPException, Request
from jose import JWTError
from jose import jwt as jose_jwt
from passlib.context import CryptContext
from pymongo.database import Database

from .config import JWT_ALGORITHM, JWT_EXPIRE_MINUTES, JWT_SECRET, TOKEN_COOKIE_NAME
from .database import get_db, utcnow

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed hash stored for this user
        return False


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = utcnow() + (expires_delta or timedelta(minutes=JWT_EXPIRE_MINUTES))
    return jose_jwt.encode({"id": user_id, "exp": expire}, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    try:
        return jose_jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        return None


def token_from_request(request: Request) -> Optional[str]:
    # An explicit Authorization header wins over the session cookie
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get(TOKEN_COOKIE_NAME)


def get_current_user(request: Request, db: Database = Depends(get_db)) -> Dict[str, Any]:
    token = token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = decode_access_token(token)
    user_id = (payload or {}).get("id")
    if not user_id or not ObjectId.is_valid(user_id):
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = db["user"].find_one({"_id": ObjectId(user_id)})
    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user
