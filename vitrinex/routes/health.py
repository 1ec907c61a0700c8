from __future__ import annotations
import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pymongo.database import Database

from ..config import ENVIRONMENT
from ..database import get_db, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

STARTED_AT = time.monotonic()


def mongo_ok(db: Database) -> bool:
    try:
        db.command("ping")
        return True
    except Exception as e:
        logger.warning(f"MongoDB ping failed: {e}")
        return False


@router.get("")
def health(db: Database = Depends(get_db)):
    return {
        "status": "ok",
        "timestamp": utcnow().isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "environment": ENVIRONMENT,
        "mongodb": "connected" if mongo_ok(db) else "disconnected",
    }


@router.get("/live")
def live():
    return {"status": "alive"}


@router.get("/ready")
def ready(db: Database = Depends(get_db)):
    if mongo_ok(db):
        return {"status": "ready"}
    return JSONResponse(status_code=503, content={"status": "not ready"})
