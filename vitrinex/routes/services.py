from __future__ import annotations
import logging
import re
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database

from ..auth import get_current_user
from ..database import create_document, get_db, serialize, utcnow
from ..helpers import get_owned_store, get_store_or_404, oid
from ..schemas import ServiceCreate, ServiceReorder, ServiceUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stores/{store_id}/services", tags=["services"])

SERVICE_SORT = [("display_order", 1), ("name", 1)]


def format_duration(minutes: int) -> str:
    hours, mins = divmod(int(minutes or 0), 60)
    if hours and mins:
        return f"{hours}h {mins}min"
    if hours:
        return f"{hours}h"
    return f"{mins}min"


def present_service(doc: Dict[str, Any]) -> Dict[str, Any]:
    out = serialize(doc)
    out["formatted_duration"] = format_duration(out.get("duration", 0))
    return out


def _find_service(db: Database, store_id: Any, service_id: str) -> Dict[str, Any]:
    service = db["service"].find_one({"_id": oid(service_id), "store": store_id})
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


@router.get("")
def list_services(
    store_id: str,
    include_inactive: bool = False,
    category: Optional[str] = None,
    tags: Optional[str] = None,
    search: Optional[str] = None,
    db: Database = Depends(get_db),
):
    store = get_store_or_404(db, store_id)
    q: Dict[str, Any] = {"store": store["_id"]}
    if not include_inactive:
        q["is_active"] = True
    if category and category.strip():
        q["category"] = category.strip()
    if tags:
        tag_list = [t.strip() for t in tags.split(",") if t.strip()]
        if tag_list:
            q["tags"] = {"$in": tag_list}
    if search and search.strip():
        pattern = re.escape(search.strip())
        q["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]
    return [present_service(s) for s in db["service"].find(q).sort(SERVICE_SORT)]


@router.patch("/reorder")
def reorder_services(
    store_id: str,
    payload: ServiceReorder,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = get_owned_store(db, store_id, user)
    for index, service_id in enumerate(payload.service_ids):
        db["service"].update_one(
            {"_id": oid(service_id), "store": store["_id"]},
            {"$set": {"display_order": index, "updated_at": utcnow()}},
        )
    services = [present_service(s) for s in db["service"].find({"store": store["_id"]}).sort(SERVICE_SORT)]
    return {"message": "Services reordered", "services": services}


@router.get("/{service_id}")
def get_service(store_id: str, service_id: str, db: Database = Depends(get_db)):
    return present_service(_find_service(db, oid(store_id), service_id))


@router.post("", status_code=201)
def create_service(
    store_id: str,
    payload: ServiceCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = get_owned_store(db, store_id, user)
    if not payload.name:
        raise HTTPException(status_code=400, detail="Service name is required")
    service_id = create_document("service", {**payload.model_dump(), "store": store["_id"]}, db=db)
    return present_service(db["service"].find_one({"_id": oid(service_id)}))


@router.put("/{service_id}")
def update_service(
    store_id: str,
    service_id: str,
    payload: ServiceUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = get_owned_store(db, store_id, user)
    service = _find_service(db, store["_id"], service_id)
    update = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in update and not update["name"]:
        raise HTTPException(status_code=400, detail="Service name cannot be empty")
    update["updated_at"] = utcnow()
    db["service"].update_one({"_id": service["_id"]}, {"$set": update})
    return present_service(db["service"].find_one({"_id": service["_id"]}))


@router.delete("/{service_id}")
def delete_service(
    store_id: str,
    service_id: str,
    permanent: bool = False,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = get_owned_store(db, store_id, user)
    service = _find_service(db, store["_id"], service_id)
    if permanent:
        db["service"].delete_one({"_id": service["_id"]})
        return {"message": "Service permanently deleted"}

    # Bookings keep a snapshot of the service, so a soft delete is the default
    db["service"].update_one({"_id": service["_id"]}, {"$set": {"is_active": False, "updated_at": utcnow()}})
    return {"message": "Service deactivated", "service": present_service(db["service"].find_one({"_id": service["_id"]}))}


@router.patch("/{service_id}/toggle")
def toggle_service(
    store_id: str,
    service_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = get_owned_store(db, store_id, user)
    service = _find_service(db, store["_id"], service_id)
    is_active = not service.get("is_active", True)
    db["service"].update_one({"_id": service["_id"]}, {"$set": {"is_active": is_active, "updated_at": utcnow()}})
    return {
        "message": "Service activated" if is_active else "Service deactivated",
        "service": present_service(db["service"].find_one({"_id": service["_id"]})),
    }
