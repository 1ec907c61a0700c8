from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database

from ..auth import get_current_user
from ..database import create_document, get_db, serialize, utcnow
from ..helpers import get_owned_store, is_owner, oid
from ..schemas import MessageCreate, PublicMessageCreate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["messages"])

# A conversation hangs off either a booking or an order
PARENTS = {
    "bookings": ("booking", "Booking not found"),
    "orders": ("order", "Order not found"),
}

# sender_type -> counter bumped on the *other* side
UNREAD_FIELD = {"owner": "unread_messages_customer", "customer": "unread_messages_owner"}

CHAT_LIST_LIMIT = 50


def _parent(db: Database, kind: str, parent_id: str) -> Dict[str, Any]:
    name, missing = PARENTS[kind]
    doc = db[name].find_one({"_id": oid(parent_id)})
    if not doc:
        raise HTTPException(status_code=404, detail=missing)
    return doc


def _owned_parent(db: Database, kind: str, parent_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
    doc = _parent(db, kind, parent_id)
    store = db["store"].find_one({"_id": doc["store"]})
    if not store or not is_owner(store, user):
        logger.warning(f"User {user['_id']} denied access to {kind} {parent_id} messages")
        raise HTTPException(status_code=403, detail="Not authorized")
    return doc


def _customer_parent(db: Database, kind: str, parent_id: str, email: Optional[str]) -> Dict[str, Any]:
    if not email or not email.strip():
        raise HTTPException(status_code=400, detail="Email is required")
    doc = _parent(db, kind, parent_id)
    if (doc.get("customer_email") or "").lower() != email.strip().lower():
        raise HTTPException(status_code=403, detail="Not authorized")
    return doc


def _read_thread(db: Database, kind: str, parent: Dict[str, Any], reader: str):
    """Return the thread oldest first and mark the other side's messages read."""
    field, _ = PARENTS[kind]
    messages = [serialize(m) for m in db["message"].find({field: parent["_id"]}).sort("created_at", 1)]

    writer = "customer" if reader == "owner" else "owner"
    db["message"].update_many(
        {field: parent["_id"], "sender_type": writer, "is_read": False},
        {"$set": {"is_read": True, "read_at": utcnow()}},
    )
    db[field].update_one({"_id": parent["_id"]}, {"$set": {UNREAD_FIELD[writer]: 0}})
    return messages


def _post(db: Database, kind: str, parent: Dict[str, Any], sender_type: str, content: str, sender=None):
    field, _ = PARENTS[kind]
    now = utcnow()
    message_id = create_document(
        "message",
        {
            field: parent["_id"],
            "store": parent["store"],
            "sender": sender,
            "sender_type": sender_type,
            "content": content,
            "is_read": False,
            "read_at": None,
        },
        db=db,
    )
    db[field].update_one(
        {"_id": parent["_id"]},
        {"$inc": {UNREAD_FIELD[sender_type]: 1}, "$set": {"last_message_at": now}},
    )
    return serialize(db["message"].find_one({"_id": oid(message_id)}))


# ============== OWNER ==================
@router.get("/api/{kind}/{parent_id}/messages")
def get_messages(
    kind: str,
    parent_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    _check_kind(kind)
    parent = _owned_parent(db, kind, parent_id, user)
    return _read_thread(db, kind, parent, reader="owner")


@router.post("/api/{kind}/{parent_id}/messages", status_code=201)
def send_message(
    kind: str,
    parent_id: str,
    payload: MessageCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    _check_kind(kind)
    parent = _owned_parent(db, kind, parent_id, user)
    return _post(db, kind, parent, "owner", payload.content, sender=user["_id"])


@router.delete("/api/{kind}/{parent_id}/messages")
def delete_messages(
    kind: str,
    parent_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    _check_kind(kind)
    parent = _owned_parent(db, kind, parent_id, user)
    field, _ = PARENTS[kind]
    res = db["message"].delete_many({field: parent["_id"]})
    db[field].update_one(
        {"_id": parent["_id"]},
        {"$set": {"unread_messages_owner": 0, "unread_messages_customer": 0, "last_message_at": None}},
    )
    logger.info(f"Deleted {res.deleted_count} messages of {field} {parent_id}")
    return {"message": "Messages deleted", "deleted_count": res.deleted_count}


@router.get("/api/stores/{store_id}/bookings-with-messages")
def bookings_with_messages(
    store_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return _with_messages(db, "booking", store_id, user)


@router.get("/api/stores/{store_id}/orders-with-messages")
def orders_with_messages(
    store_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return _with_messages(db, "order", store_id, user)


def _with_messages(db: Database, name: str, store_id: str, user: Dict[str, Any]):
    store = get_owned_store(db, store_id, user)
    cursor = (
        db[name]
        .find({"store": store["_id"], "last_message_at": {"$ne": None}})
        .sort("last_message_at", -1)
        .limit(CHAT_LIST_LIMIT)
    )
    return [serialize(doc) for doc in cursor]


def _check_kind(kind: str) -> None:
    if kind not in PARENTS:
        raise HTTPException(status_code=404, detail="Not found")


# ============== CUSTOMER ==================
@router.get("/api/public/{kind}/{parent_id}/messages")
def get_messages_public(kind: str, parent_id: str, email: Optional[str] = None, db: Database = Depends(get_db)):
    _check_kind(kind)
    parent = _customer_parent(db, kind, parent_id, email)
    return _read_thread(db, kind, parent, reader="customer")


@router.post("/api/public/{kind}/{parent_id}/messages", status_code=201)
def send_message_public(kind: str, parent_id: str, payload: PublicMessageCreate, db: Database = Depends(get_db)):
    _check_kind(kind)
    parent = _customer_parent(db, kind, parent_id, payload.email)
    return _post(db, kind, parent, "customer", payload.content)
