from __future__ import annotations
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database

from ..auth import get_current_user
from ..database import create_document, get_db, serialize, utcnow
from ..helpers import get_owned_store, get_store_or_404, oid, require_mode
from ..schemas import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stores/{store_id}", tags=["products"])


def _owned_product_store(db: Database, store_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
    store = get_owned_store(db, store_id, user)
    require_mode(store, "products")
    return store


@router.get("/public-products")
def list_public_products(store_id: str, db: Database = Depends(get_db)):
    store = get_store_or_404(db, store_id)
    require_mode(store, "products")
    cursor = db["product"].find({"store": store["_id"], "is_active": {"$ne": False}}).sort("created_at", 1)
    return [serialize(p) for p in cursor]


@router.get("/products")
def list_products(
    store_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = _owned_product_store(db, store_id, user)
    cursor = db["product"].find({"store": store["_id"]}).sort("created_at", -1)
    return [serialize(p) for p in cursor]


@router.post("/products", status_code=201)
def create_product(
    store_id: str,
    payload: ProductCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = _owned_product_store(db, store_id, user)
    data = payload.model_dump()
    data["name"] = data["name"].strip()
    product_id = create_document("product", {**data, "store": store["_id"]}, db=db)
    return serialize(db["product"].find_one({"_id": oid(product_id)}))


@router.put("/products/{product_id}")
def update_product(
    store_id: str,
    product_id: str,
    payload: ProductUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = _owned_product_store(db, store_id, user)
    update = payload.model_dump(exclude_unset=True, exclude_none=True)
    update["updated_at"] = utcnow()
    res = db["product"].update_one({"_id": oid(product_id), "store": store["_id"]}, {"$set": update})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    return serialize(db["product"].find_one({"_id": oid(product_id)}))


@router.delete("/products/{product_id}")
def delete_product(
    store_id: str,
    product_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    store = _owned_product_store(db, store_id, user)
    res = db["product"].delete_one({"_id": oid(product_id), "store": store["_id"]})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"success": True}
