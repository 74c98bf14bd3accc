# Schemas package - re-export for compatibility
from .common.common import ErrorResponse, MessageResponse
from .auth.auth import (
    SendOTPRequest, SendOTPResponse, VerifyOTPRequest, VerifyOTPResponse,
    RefreshRequest, RefreshResponse,
)
from .products.product import NearbySeller, NearbyProductItem, NearbyProductsResponse

__all__ = [
    "ErrorResponse",
    "MessageResponse",
    "SendOTPRequest",
    "SendOTPResponse",
    "VerifyOTPRequest",
    "VerifyOTPResponse",
    "RefreshRequest",
    "RefreshResponse",
    "NearbySeller",
    "NearbyProductItem",
    "NearbyProductsResponse",
]
