from .documents import router as documents_router
from .indices import router as indices_router

__all__ = ["documents_router", "indices_router"]
