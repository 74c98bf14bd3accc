# Routers package
from . import otp_router
from . import session_router
from . import products_router

__all__ = [
    "otp_router",
    "session_router",
    "products_router",
]
