from .health import router as health_router
from .pods import router as pods_router
from .sentinels import router as sentinels_router

__all__ = [
    "health_router",
    "pods_router",
    "sentinels_router",
]
