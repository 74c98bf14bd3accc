# fastfab/schemas/products/product.py
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

class NearbySeller(BaseModel):
    id: str
    shopName: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    latitude: float
    longitude: float
    distance: float

class NearbyProductItem(BaseModel):
    id: str
    sellerId: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    sellingPrice: float
    createdAt: datetime
    distance: float
    seller: NearbySeller

class NearbyProductsResponse(BaseModel):
    products: List[NearbyProductItem]
    isLocationFilter: bool = True
    totalProducts: int
    totalPages: int
    currentPage: int
