from __future__ import annotations
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from pymongo import ReturnDocument
from pymongo.database import Database

from .. import themes
from ..auth import get_current_user
from ..database import get_db, serialize, utcnow
from ..helpers import get_owned_store, get_store_or_404
from ..schemas import AppearanceUpdate, ApplyTheme

logger = logging.getLogger(__name__)

router = APIRouter(tags=["appearance"])


def _load(db: Database, store: Dict[str, Any]) -> Dict[str, Any]:
    doc = db["store_appearance"].find_one({"store": store["_id"]})
    if doc:
        return doc
    now = utcnow()
    doc = {**themes.default_appearance(), "store": store["_id"], "created_at": now, "updated_at": now}
    # Upsert so two concurrent first reads end up with a single document
    doc = db["store_appearance"].find_one_and_update(
        {"store": store["_id"]},
        {"$setOnInsert": doc},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    logger.info(f"Default appearance created for store {store['_id']}")
    return doc


def _save(db: Database, current: Dict[str, Any], new: Dict[str, Any]) -> Dict[str, Any]:
    fields = {k: v for k, v in new.items() if k not in ("_id", "store", "created_at")}
    fields["version"] = int(current.get("version", 1)) + 1
    fields["updated_at"] = utcnow()
    db["store_appearance"].update_one({"_id": current["_id"]}, {"$set": fields})
    return db["store_appearance"].find_one({"_id": current["_id"]})


@router.get("/api/appearance/themes")
def list_themes():
    return themes.catalogue()


@router.get("/api/stores/{store_id}/appearance")
def get_appearance(store_id: str, db: Database = Depends(get_db)):
    store = get_store_or_404(db, store_id)
    return serialize(_load(db, store))


@router.put("/api/stores/{store_id}/appearance")
def update_appearance(
    store_id: str,
    payload: AppearanceUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = get_owned_store(db, store_id, user)
    current = _load(db, store)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    updated = themes.deep_merge(current, changes)
    doc = _save(db, current, updated)
    logger.info(f"Appearance updated for store {store_id} (v{doc['version']})")
    return serialize(doc)


@router.post("/api/stores/{store_id}/appearance/apply-theme")
def apply_theme(
    store_id: str,
    payload: ApplyTheme,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = get_owned_store(db, store_id, user)
    current = _load(db, store)
    try:
        updated = themes.apply_theme(current, payload.theme_name)
    except KeyError:
        raise HTTPException(status_code=400, detail=f"Unknown theme: {payload.theme_name}")
    doc = _save(db, current, updated)
    logger.info(f"Theme {payload.theme_name} applied to store {store_id}")
    return serialize(doc)


@router.post("/api/stores/{store_id}/appearance/reset")
def reset_appearance(
    store_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = get_owned_store(db, store_id, user)
    db["store_appearance"].delete_one({"store": store["_id"]})
    logger.info(f"Appearance reset for store {store_id}")
    return serialize(_load(db, store))
