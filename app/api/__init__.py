# API endpoints and routers

from .classes_endpoints import router as classes_router
from .metrics_endpoints import router as metrics_router

__all__ = [
    "classes_router",
    "metrics_router",
]
