from __future__ import annotations
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from .. import availability
from ..auth import get_current_user
from ..database import create_document, get_db, serialize, utcnow
from ..helpers import get_owned_store, get_store_or_404, oid, require_mode
from ..schemas import AvailabilityUpdate, BookingCreate, BookingStatusUpdate, SpecialDayIn

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bookings"])

BOOKING_SORT = [("date", 1), ("slot", 1)]


def _booking_store(db: Database, store_id: str) -> Dict[str, Any]:
    store = get_store_or_404(db, store_id)
    require_mode(store, "bookings")
    return store


def _owned_booking_store(db: Database, store_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
    store = get_owned_store(db, store_id, user)
    require_mode(store, "bookings")
    return store


def _parse_day(value: str) -> date:
    day = availability.parse_date(value)
    if day is None:
        raise HTTPException(status_code=400, detail="Invalid date, use YYYY-MM-DD")
    return day


def _active_service(db: Database, store: Dict[str, Any], service_id: Optional[str]) -> Optional[Dict[str, Any]]:
    if not service_id:
        return None
    service = db["service"].find_one({"_id": oid(service_id), "store": store["_id"]})
    if not service or not service.get("is_active", True):
        raise HTTPException(status_code=404, detail="Service not found or inactive")
    return service


def _bookings_on(db: Database, store: Dict[str, Any], day: date) -> List[Dict[str, Any]]:
    return list(
        db["booking"].find(
            {"store": store["_id"], "date": day.isoformat(), "status": {"$ne": "cancelled"}},
            {"slot": 1, "duration": 1, "status": 1, "date": 1},
        )
    )


# ============== SCHEDULE ==================
@router.get("/api/stores/{store_id}/availability")
def get_availability(store_id: str, db: Database = Depends(get_db)):
    store = _booking_store(db, store_id)
    return {
        "availability": store.get("booking_availability") or [],
        "special_days": store.get("special_days") or [],
    }


@router.put("/api/stores/{store_id}/availability")
def update_availability(
    store_id: str,
    payload: AvailabilityUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = _owned_booking_store(db, store_id, user)
    update: Dict[str, Any] = {
        "booking_availability": availability.normalize_availability(payload.availability),
        "updated_at": utcnow(),
    }
    if payload.special_days is not None:
        update["special_days"] = availability.normalize_special_days(payload.special_days)
    db["store"].update_one({"_id": store["_id"]}, {"$set": update})
    logger.info(f"Weekly schedule updated for store {store_id}")
    return get_availability(store_id, db)


@router.get("/api/stores/{store_id}/special-days")
def list_special_days(store_id: str, db: Database = Depends(get_db)):
    store = _booking_store(db, store_id)
    return store.get("special_days") or []


@router.post("/api/stores/{store_id}/special-days")
def save_special_day(
    store_id: str,
    payload: SpecialDayIn,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = _owned_booking_store(db, store_id, user)
    _parse_day(payload.date)
    blocks = [b.model_dump() for b in payload.time_blocks]
    errors = [e for b in blocks for e in availability.validate_time_block(b)]
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    if not payload.is_closed and not blocks:
        raise HTTPException(status_code=400, detail="An open special day needs at least one time block")

    special = availability.normalize_special_day(payload.model_dump())
    others = [sd for sd in store.get("special_days") or [] if sd.get("date") != special["date"]]
    special_days = availability.normalize_special_days(others + [special])
    db["store"].update_one({"_id": store["_id"]}, {"$set": {"special_days": special_days, "updated_at": utcnow()}})
    return special_days


@router.delete("/api/stores/{store_id}/special-days/{day}")
def delete_special_day(
    store_id: str,
    day: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = _owned_booking_store(db, store_id, user)
    key = _parse_day(day).isoformat()
    current = store.get("special_days") or []
    remaining = [sd for sd in current if sd.get("date") != key]
    if len(remaining) == len(current):
        raise HTTPException(status_code=404, detail="Special day not found")
    db["store"].update_one({"_id": store["_id"]}, {"$set": {"special_days": remaining, "updated_at": utcnow()}})
    return remaining


@router.get("/api/stores/{store_id}/availability/date/{day}")
def get_availability_for_date(
    store_id: str,
    day: str,
    service_id: Optional[str] = None,
    db: Database = Depends(get_db),
):
    store = _booking_store(db, store_id)
    target = _parse_day(day)
    service = _active_service(db, store, service_id)
    duration = service.get("duration") if service else None

    weekly = store.get("booking_availability") or []
    special_days = store.get("special_days") or []
    resolved = availability.availability_for_date(target, weekly, special_days)
    slots = availability.available_slots(target, weekly, special_days, _bookings_on(db, store, target), duration)
    return {
        "date": target.isoformat(),
        **resolved.to_dict(),
        "service_duration": duration,
        "slots": slots,
    }


# ============== APPOINTMENTS ==================
@router.post("/api/stores/{store_id}/appointments", status_code=201)
def create_appointment(store_id: str, payload: BookingCreate, db: Database = Depends(get_db)):
    store = _booking_store(db, store_id)
    target = _parse_day(payload.date)
    if target < utcnow().date():
        raise HTTPException(status_code=400, detail="The selected date is in the past")

    service = _active_service(db, store, payload.service_id)
    offered = availability.offered_slots(
        target,
        store.get("booking_availability") or [],
        store.get("special_days") or [],
        service.get("duration") if service else None,
    )
    if payload.slot not in offered:
        raise HTTPException(status_code=400, detail="The selected slot is not available")
    duration = offered[payload.slot]

    if availability.conflicts(payload.slot, duration, _bookings_on(db, store, target)):
        logger.warning(f"Slot {payload.date} {payload.slot} already taken at store {store_id}")
        raise HTTPException(status_code=409, detail="That slot was already booked, please pick another one")

    doc = {
        "store": store["_id"],
        "service": service["_id"] if service else None,
        "service_name": service.get("name") if service else None,
        "duration": duration,
        "price": float(service.get("price", 0)) if service else 0.0,
        "customer_name": payload.customer_name,
        "customer_email": payload.customer_email.lower(),
        "customer_phone": payload.customer_phone or "",
        "date": target.isoformat(),
        "slot": payload.slot,
        "notes": payload.notes.strip(),
        "status": "pending",
        "unread_messages_owner": 0,
        "unread_messages_customer": 0,
        "last_message_at": None,
    }
    try:
        booking_id = create_document("booking", doc, db=db)
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="That slot was already booked, please pick another one")

    logger.info(f"Booking {booking_id} created for store {store_id} on {doc['date']} at {doc['slot']}")
    return serialize(db["booking"].find_one({"_id": oid(booking_id)}))


@router.get("/api/stores/{store_id}/appointments")
def list_appointments(
    store_id: str,
    status: Optional[str] = None,
    day: Optional[str] = Query(None, alias="date"),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = _owned_booking_store(db, store_id, user)
    q: Dict[str, Any] = {"store": store["_id"]}
    if status:
        q["status"] = status
    if day:
        q["date"] = _parse_day(day).isoformat()
    return [serialize(b) for b in db["booking"].find(q).sort(BOOKING_SORT)]


@router.patch("/api/stores/{store_id}/appointments/{booking_id}/status")
def update_appointment_status(
    store_id: str,
    booking_id: str,
    payload: BookingStatusUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = _owned_booking_store(db, store_id, user)
    res = db["booking"].update_one(
        {"_id": oid(booking_id), "store": store["_id"]},
        {"$set": {"status": payload.status, "updated_at": utcnow()}},
    )
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Booking not found")
    return serialize(db["booking"].find_one({"_id": oid(booking_id)}))


@router.delete("/api/stores/{store_id}/appointments/{booking_id}")
def delete_appointment(
    store_id: str,
    booking_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = _owned_booking_store(db, store_id, user)
    res = db["booking"].delete_one({"_id": oid(booking_id), "store": store["_id"]})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Booking not found")
    db["message"].delete_many({"booking": oid(booking_id)})
    return {"success": True}


# ============== CUSTOMER ==================
@router.get("/api/public/bookings")
def list_customer_bookings(email: str, db: Database = Depends(get_db)):
    bookings = list(db["booking"].find({"customer_email": email.strip().lower()}).sort(BOOKING_SORT))
    store_names = {
        s["_id"]: s.get("name")
        for s in db["store"].find({"_id": {"$in": list({b["store"] for b in bookings})}}, {"name": 1})
    }
    out = []
    for b in bookings:
        item = serialize(b)
        item["store_name"] = store_names.get(b["store"])
        out.append(item)
    return out
