from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol, Sequence, Tuple


@dataclass
class SellerLocationDto:
    id: str
    shop_name: Optional[str]
    city: Optional[str]
    state: Optional[str]
    latitude: float
    longitude: float


@dataclass
class ProductDto:
    id: str
    seller_id: str
    name: str
    description: Optional[str]
    category: Optional[str]
    subcategory: Optional[str]
    selling_price: float
    created_at: datetime


@dataclass
class ProductFilters:
    category: Optional[str] = None
    subcategory: Optional[str] = None
    search: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None


class ProductRepository(Protocol):
    def list_seller_locations(self) -> List[SellerLocationDto]:
        ...

    def find_active_by_sellers(self, seller_ids: Sequence[str], filters: ProductFilters, offset: int, limit: int) -> Tuple[List[ProductDto], int]:
        """Page of active products for the sellers plus the total match count."""
        ...
