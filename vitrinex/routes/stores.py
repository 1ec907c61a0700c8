from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pymongo.database import Database

from ..auth import get_current_user
from ..database import create_document, get_db, get_documents, serialize, utcnow
from ..helpers import get_owned_store, get_store_or_404, oid
from ..schemas import StoreIn, StoreSave, StoreUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stores", tags=["stores"])

PUBLIC_FIELDS = (
    "name",
    "description",
    "logo_url",
    "city",
    "business_type",
    "mode",
    "lat",
    "lng",
    "address",
    "is_active",
)

DETAIL_FIELDS = PUBLIC_FIELDS + (
    "schedule_text",
    "booking_availability",
    "special_days",
    "primary_color",
    "accent_color",
    "bg_mode",
    "bg_pattern",
    "hero_title",
    "hero_subtitle",
    "price_from",
    "created_at",
    "updated_at",
)

# Collections holding documents that belong to a store
STORE_CHILDREN = ("product", "service", "booking", "order", "message", "store_appearance")


def _owners_by_id(db: Database, stores: List[Dict[str, Any]]) -> Dict[Any, Dict[str, Any]]:
    owner_ids = list({s["owner"] for s in stores if s.get("owner")})
    if not owner_ids:
        return {}
    return {u["_id"]: u for u in db["user"].find({"_id": {"$in": owner_ids}})}


def _present(store: Dict[str, Any], fields, owner: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    out = {"id": str(store["_id"])}
    for f in fields:
        out[f] = store.get(f)
    out["owner_name"] = owner.get("username") if owner else None
    return out


def _store_fields(payload: StoreIn, partial: bool = False) -> Dict[str, Any]:
    # Updates only touch the fields the client sent
    data = payload.model_dump(exclude={"id"}, exclude_unset=partial, exclude_none=partial)
    if not partial:
        data["is_active"] = True
    return data


# ============== PUBLIC ==================
@router.get("/public")
def list_public_stores(
    city: Optional[str] = None,
    business_type: Optional[str] = None,
    mode: Optional[str] = None,
    db: Database = Depends(get_db),
):
    q: Dict[str, Any] = {"is_active": True}
    if city:
        q["city"] = city
    if business_type:
        q["business_type"] = business_type
    if mode:
        q["mode"] = mode
    stores = list(db["store"].find(q).sort("name", 1))
    owners = _owners_by_id(db, stores)
    return [_present(s, PUBLIC_FIELDS, owners.get(s.get("owner"))) for s in stores]


# ============== OWNER ==================
@router.get("/my")
def get_my_stores(user: Dict[str, Any] = Depends(get_current_user), db: Database = Depends(get_db)):
    stores = get_documents("store", {"owner": user["_id"]}, sort=[("created_at", 1)], db=db)
    if not stores:
        raise HTTPException(status_code=404, detail="You have not created any store yet")
    return stores


@router.post("/my")
@router.put("/my")
def save_my_store(
    payload: StoreSave,
    response: Response,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    if payload.id:
        return _update_owned(db, payload.id, user, _store_fields(payload, partial=True))

    if not payload.name:
        raise HTTPException(status_code=400, detail="Store name is required")
    sent = payload.model_dump(exclude={"id"}, exclude_unset=True, exclude_none=True)
    data = _store_fields(StoreIn.model_validate(sent))
    store_id = create_document(
        "store",
        {**data, "owner": user["_id"], "booking_availability": [], "special_days": []},
        db=db,
    )
    logger.info(f"Store {store_id} created by user {user['_id']} in {data['mode']} mode")
    response.status_code = 201
    return serialize(db["store"].find_one({"_id": oid(store_id)}))


@router.put("/{store_id}")
def update_store(
    store_id: str,
    payload: StoreUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    get_owned_store(db, store_id, user)
    return _update_owned(db, store_id, user, _store_fields(payload, partial=True))


@router.delete("/my/{store_id}")
def delete_my_store(
    store_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = get_owned_store(db, store_id, user)
    for name in STORE_CHILDREN:
        db[name].delete_many({"store": store["_id"]})
    db["store"].delete_one({"_id": store["_id"]})
    logger.info(f"Store {store_id} deleted with its catalog, bookings, orders and chats")
    return {"success": True, "message": "Store deleted"}


@router.get("/{store_id}")
def get_store(store_id: str, db: Database = Depends(get_db)):
    store = get_store_or_404(db, store_id)
    owner = db["user"].find_one({"_id": store.get("owner")}) if store.get("owner") else None
    out = _present(store, DETAIL_FIELDS, owner)
    out["booking_availability"] = store.get("booking_availability") or []
    out["special_days"] = store.get("special_days") or []
    out["owner_id"] = str(store["owner"]) if store.get("owner") else None
    return out


def _update_owned(db: Database, store_id: str, user: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
    res = db["store"].update_one(
        {"_id": oid(store_id), "owner": user["_id"]},
        {"$set": {**data, "updated_at": utcnow()}},
    )
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Store not found")
    return serialize(db["store"].find_one({"_id": oid(store_id)}))
