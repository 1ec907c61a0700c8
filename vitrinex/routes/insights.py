from __future__ import annotations
import logging
from collections import Counter
from typing import Any, Dict, Iterable, List

from fastapi import APIRouter, Depends
from pymongo.database import Database

from ..auth import get_current_user
from ..database import get_db
from ..helpers import get_owned_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stores/{store_id}/insights", tags=["insights"])

TOP_N = 5
LOW_STOCK_THRESHOLD = 5


def product_insights(products: Iterable[Dict[str, Any]], orders: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    products = list(products)
    orders = [o for o in orders if o.get("status") != "cancelled"]

    sold: Counter = Counter()
    revenue: Counter = Counter()
    for order in orders:
        for item in order.get("items") or []:
            pid = str(item.get("product"))
            qty = int(item.get("quantity") or 1)
            sold[pid] += qty
            revenue[pid] += item.get("subtotal", qty * float(item.get("unit_price") or 0))

    stats = [
        {
            "id": str(p["_id"]),
            "name": p.get("name"),
            "price": p.get("price"),
            "stock": p.get("stock"),
            "sold": sold[str(p["_id"])],
            "revenue": round(revenue[str(p["_id"])], 2),
        }
        for p in products
    ]
    best_sellers = sorted(stats, key=lambda s: s["sold"], reverse=True)[:TOP_N]
    slow_movers = sorted(stats, key=lambda s: s["sold"])[:TOP_N]
    low_stock = [s for s in stats if isinstance(s["stock"], int) and s["stock"] <= LOW_STOCK_THRESHOLD]

    suggestions: Dict[str, List[str]] = {"inventory": [], "pricing": [], "marketing": []}
    for s in low_stock:
        suggestions["inventory"].append(f'Restock "{s["name"]}" (stock {s["stock"]}, sold {s["sold"]}).')
    for s in slow_movers:
        if s["sold"] == 0:
            suggestions["marketing"].append(
                f'"{s["name"]}" has not sold yet. Feature it on your storefront or bundle it with a best seller.'
            )
        else:
            suggestions["pricing"].append(
                f'Consider a temporary discount on "{s["name"]}" to lift its sales (sold {s["sold"]}).'
            )

    return {
        "summary": {
            "total_products": len(products),
            "total_orders": len(orders),
            "total_revenue": round(sum(s["revenue"] for s in stats), 2),
        },
        "best_sellers": best_sellers,
        "slow_movers": slow_movers,
        "low_stock": low_stock,
        "suggestions": suggestions,
    }


def booking_insights(bookings: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    bookings = list(bookings)
    by_status = Counter(b.get("status") or "pending" for b in bookings)
    by_slot = Counter(b["slot"] for b in bookings if b.get("slot"))
    by_service = Counter(b.get("service_name") or "General" for b in bookings)

    slots = [{"slot": slot, "count": count} for slot, count in sorted(by_slot.items())]
    peak_slots = sorted(slots, key=lambda s: s["count"], reverse=True)[:TOP_N]
    low_demand_slots = sorted(slots, key=lambda s: s["count"])[:TOP_N]
    popular_services = [{"service": name, "count": count} for name, count in by_service.most_common()]

    suggestions: Dict[str, List[str]] = {"schedule": [], "marketing": []}
    if peak_slots:
        suggestions["schedule"].append(
            f"Your busiest times are {', '.join(s['slot'] for s in peak_slots)}. Keep enough capacity there."
        )
    if low_demand_slots:
        suggestions["schedule"].append(
            f"Quiet times: {', '.join(s['slot'] for s in low_demand_slots)}. Try offers or packs in those hours."
        )
    if popular_services:
        top = ", ".join(s["service"] for s in popular_services[:3])
        suggestions["marketing"].append(f"Your most requested services are {top}. Highlight them on your page.")

    return {
        "summary": {
            "total_bookings": len(bookings),
            "pending": by_status["pending"],
            "confirmed": by_status["confirmed"],
            "completed": by_status["completed"],
            "cancelled": by_status["cancelled"],
        },
        "peak_slots": peak_slots,
        "low_demand_slots": low_demand_slots,
        "popular_services": popular_services,
        "suggestions": suggestions,
    }


@router.get("/products")
def get_product_insights(
    store_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = get_owned_store(db, store_id, user)
    products = db["product"].find({"store": store["_id"]})
    orders = db["order"].find({"store": store["_id"]}, {"items": 1, "status": 1})
    return product_insights(products, orders)


@router.get("/bookings")
def get_booking_insights(
    store_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = get_owned_store(db, store_id, user)
    bookings = db["booking"].find({"store": store["_id"]}, {"slot": 1, "status": 1, "service_name": 1})
    return booking_insights(bookings)
