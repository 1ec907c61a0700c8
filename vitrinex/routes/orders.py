from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database

from ..auth import get_current_user
from ..database import create_document, get_db, serialize, utcnow
from ..helpers import get_owned_store, get_store_or_404, oid, require_mode
from ..schemas import OrderCreate, OrderStatusUpdate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["orders"])


@router.post("/api/stores/{store_id}/orders", status_code=201)
def create_order(store_id: str, order: OrderCreate, db: Database = Depends(get_db)):
    store = get_store_or_404(db, store_id)
    require_mode(store, "products")

    # Same product listed twice is folded into one line
    quantities: Dict[Any, int] = {}
    for it in order.items:
        pid = oid(it.product_id)
        quantities[pid] = quantities.get(pid, 0) + it.quantity

    products = {
        p["_id"]: p
        for p in db["product"].find(
            {"_id": {"$in": list(quantities)}, "store": store["_id"], "is_active": {"$ne": False}}
        )
    }
    if len(products) != len(quantities):
        raise HTTPException(status_code=400, detail="One or more products are no longer available")

    total = 0.0
    line_items: List[Dict[str, Any]] = []
    for pid, qty in quantities.items():
        product = products[pid]
        unit_price = float(product.get("price", 0))
        subtotal = round(unit_price * qty, 2)
        total += subtotal
        line_items.append({
            "product": pid,
            "product_name": product.get("name"),
            "unit_price": unit_price,
            "quantity": qty,
            "subtotal": subtotal,
        })

    doc = {
        "store": store["_id"],
        "items": line_items,
        "total": round(total, 2),
        "customer_name": order.customer_name.strip(),
        "customer_email": (order.customer_email or "").lower(),
        "customer_phone": order.customer_phone or "",
        "customer_address": order.customer_address or "",
        "notes": order.notes.strip(),
        "status": "pending",
        "unread_messages_owner": 0,
        "unread_messages_customer": 0,
        "last_message_at": None,
    }
    order_id = create_document("order", doc, db=db)
    logger.info(f"Order {order_id} placed at store {store_id} for {doc['total']}")
    return serialize(db["order"].find_one({"_id": oid(order_id)}))


@router.get("/api/stores/{store_id}/orders")
def list_orders(
    store_id: str,
    status: Optional[str] = None,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = get_owned_store(db, store_id, user)
    require_mode(store, "products")
    q: Dict[str, Any] = {"store": store["_id"]}
    if status:
        q["status"] = status
    return [serialize(o) for o in db["order"].find(q).sort("created_at", -1)]


@router.patch("/api/stores/{store_id}/orders/{order_id}/status")
def update_order_status(
    store_id: str,
    order_id: str,
    payload: OrderStatusUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = get_owned_store(db, store_id, user)
    res = db["order"].update_one(
        {"_id": oid(order_id), "store": store["_id"]},
        {"$set": {"status": payload.status, "updated_at": utcnow()}},
    )
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Order not found")
    return serialize(db["order"].find_one({"_id": oid(order_id)}))


@router.get("/api/public/orders")
def list_customer_orders(email: str, db: Database = Depends(get_db)):
    orders = list(db["order"].find({"customer_email": email.strip().lower()}).sort("created_at", -1))
    store_names = {
        s["_id"]: s.get("name")
        for s in db["store"].find({"_id": {"$in": list({o["store"] for o in orders})}}, {"name": 1})
    }
    out = []
    for o in orders:
        item = serialize(o)
        item["store_name"] = store_names.get(o["store"])
        out.append(item)
    return out
