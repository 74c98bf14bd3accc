# Models package (re-export feature modules for stable imports)
from .users.user import User
from .users.seller import Seller
from .auth.otp import WhatsAppOTP
from .auth.refresh_token import RefreshToken
from .catalog.product import Product

__all__ = [
    "User",
    "Seller",
    "WhatsAppOTP",
    "RefreshToken",
    "Product",
]
