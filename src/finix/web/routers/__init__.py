from finix.web.routers.auth import router as auth_router
from finix.web.routers.chat import router as chat_router
from finix.web.routers.metadata import router as metadata_router
from finix.web.routers.tools import router as tools_router

__all__ = [
    "auth_router",
    "chat_router",
    "metadata_router",
    "tools_router",
]
