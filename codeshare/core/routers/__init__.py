from codeshare.core.routers.auth import router as auth_router
from codeshare.core.routers.execution import router as execution_router
from codeshare.core.routers.share import router as share_router
from codeshare.core.routers.snippet import router as snippet_router

__all__ = ["auth_router", "execution_router", "share_router", "snippet_router"]
