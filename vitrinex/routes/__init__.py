from .appearance import router as appearance_router
from .auth import router as auth_router
from .bookings import router as bookings_router
from .health import router as health_router
from .insights import router as insights_router
from .messages import router as messages_router
from .orders import router as orders_router
from .products import router as products_router
from .services import router as services_router
from .stores import router as stores_router

__all__ = [
    "appearance_router",
    "auth_router",
    "bookings_router",
    "health_router",
    "insights_router",
    "messages_router",
    "orders_router",
    "products_router",
    "services_router",
    "stores_router",
]
