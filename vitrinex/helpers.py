from __future__ import annotations
import logging
from typing import Any, Dict

from bson import ObjectId
from fastapi import HTTPException
from pymongo.database import Database

logger = logging.getLogger(__name__)


def oid(id_str: Any) -> ObjectId:
    if isinstance(id_str, ObjectId):
        return id_str
    try:
        return ObjectId(id_str)
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid id")


def get_store_or_404(db: Database, store_id: str) -> Dict[str, Any]:
    store = db["store"].find_one({"_id": oid(store_id)})
    if not store:
        raise HTTPException(status_code=404, detail="Store not found")
    return store


def is_owner(store: Dict[str, Any], user: Dict[str, Any]) -> bool:
    return store.get("owner") == user["_id"]


def get_owned_store(db: Database, store_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
    store = get_store_or_404(db, store_id)
    if not is_owner(store, user):
        logger.warning(f"User {user['_id']} tried to manage store {store_id} without owning it")
        raise HTTPException(status_code=403, detail="You do not have permission to manage this store")
    return store


def require_mode(store: Dict[str, Any], mode: str) -> None:
    if store.get("mode", "products") != mode:
        if mode == "bookings":
            raise HTTPException(status_code=400, detail="This store does not take bookings")
        raise HTTPException(status_code=400, detail="This store does not sell products")
