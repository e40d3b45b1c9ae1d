from .errors import register_exception_handlers
from .geo import router as geo_router
from .matching import router as matching_router

__all__ = ["geo_router", "matching_router", "register_exception_handlers"]
