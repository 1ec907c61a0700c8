from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from .config import DATABASE_NAME, MONGODB_URI

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None
_db: Optional[Database] = None

# Fields never sent back to clients
PRIVATE_FIELDS = ("password",)


def get_db() -> Database:
    global _client, _db
    if _db is None:
        _client = MongoClient(MONGODB_URI)
        _db = _client[DATABASE_NAME]
    return _db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_document(collection_name: str, data: Dict[str, Any], db: Optional[Database] = None) -> str:
    col = (db if db is not None else get_db())[collection_name]
    now = utcnow()
    data = {
        **data,
        "created_at": now,
        "updated_at": now,
    }
    res = col.insert_one(data)
    return str(res.inserted_id)


def get_documents(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: int = 100,
    sort: Optional[List[Tuple[str, int]]] = None,
    db: Optional[Database] = None,
) -> List[Dict[str, Any]]:
    col = (db if db is not None else get_db())[collection_name]
    cursor = col.find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    cursor = cursor.limit(limit)
    return [serialize(doc) for doc in cursor]


def _jsonable(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    out = {k: _jsonable(v) for k, v in doc.items() if k not in PRIVATE_FIELDS}
    if "_id" in out:
        out["id"] = out.pop("_id")
    return out


def ensure_indexes(db: Database) -> None:
    """Create the indexes the query paths rely on. Safe to call repeatedly."""
    db["user"].create_index("email", unique=True)
    db["store"].create_index("owner")
    db["product"].create_index([("store", ASCENDING), ("is_active", ASCENDING)])
    db["service"].create_index(
        [("store", ASCENDING), ("is_active", ASCENDING), ("display_order", ASCENDING)]
    )
    db["booking"].create_index([("store", ASCENDING), ("date", ASCENDING), ("slot", ASCENDING)])
    db["booking"].create_index("customer_email")
    db["order"].create_index([("store", ASCENDING), ("created_at", DESCENDING)])
    db["message"].create_index([("booking", ASCENDING), ("created_at", ASCENDING)])
    db["message"].create_index([("order", ASCENDING), ("created_at", ASCENDING)])
    db["store_appearance"].create_index("store", unique=True)
    logger.info(f"MongoDB indexes ensured on {db.name}")
