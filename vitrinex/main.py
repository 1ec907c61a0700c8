import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import CORS_ORIGINS, ENVIRONMENT, LOG_LEVEL, PORT
from .database import ensure_indexes, get_db
from .routes import (
    appearance_router,
    auth_router,
    bookings_router,
    health_router,
    insights_router,
    messages_router,
    orders_router,
    products_router,
    services_router,
    stores_router,
)

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

logging.getLogger("pymongo").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Vitrinex API starting up ({ENVIRONMENT})")
    try:
        ensure_indexes(get_db())
    except Exception as e:
        # The API still serves requests; queries fall back to collection scans
        logger.error(f"Failed to ensure MongoDB indexes: {e}")
    yield
    logger.info("Vitrinex API shutting down...")


app = FastAPI(title="Vitrinex API", version="1.0.0", lifespan=lifespan)

logger.info(f"CORS allowed origins: {CORS_ORIGINS}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or None,
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    logger.warning(f"Validation error for {request.url.path}: {errors}")
    return JSONResponse(status_code=400, content={"message": "Invalid request data", "errors": errors})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


app.include_router(auth_router)
app.include_router(stores_router)
app.include_router(products_router)
app.include_router(services_router)
app.include_router(bookings_router)
app.include_router(orders_router)
app.include_router(messages_router)
app.include_router(appearance_router)
app.include_router(insights_router)
app.include_router(health_router)


@app.get("/")
def root():
    return {"message": "Vitrinex API running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("vitrinex.main:app", host="0.0.0.0", port=PORT)
