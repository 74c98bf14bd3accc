import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..ports.product_repo import ProductDto, ProductFilters, ProductRepository, SellerLocationDto
from ...exceptions import InvalidCoordinatesError
from ...utils import haversine_km

logger = logging.getLogger(__name__)

MAX_RADIUS_KM = 3.0
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass
class NearbyProduct:
    product: ProductDto
    seller: SellerLocationDto
    distance_km: float


@dataclass
class NearbyProductsPage:
    products: List[NearbyProduct] = field(default_factory=list)
    total: int = 0
    total_pages: int = 0
    current_page: int = 1


def _valid_coordinate(value: Optional[float], bound: float) -> bool:
    return value is not None and not math.isnan(value) and -bound <= value <= bound


@dataclass
class NearbyProductsService:
    products: ProductRepository

    def sellers_within(self, latitude: float, longitude: float, radius_km: float) -> dict:
        """Map of seller id -> (location, distance) for sellers inside the radius."""
        nearby = {}
        for seller in self.products.list_seller_locations():
            distance = haversine_km(latitude, longitude, seller.latitude, seller.longitude)
            if distance <= radius_km:
                nearby[seller.id] = (seller, round(distance, 3))
        return nearby

    def search(
        self,
        latitude: Optional[float],
        longitude: Optional[float],
        radius_km: Optional[float] = None,
        page: int = 1,
        limit: int = DEFAULT_LIMIT,
        filters: Optional[ProductFilters] = None,
    ) -> NearbyProductsPage:
        if not _valid_coordinate(latitude, 90) or not _valid_coordinate(longitude, 180):
            raise InvalidCoordinatesError()

        if radius_km is None or math.isnan(radius_km) or radius_km <= 0:
            radius_km = MAX_RADIUS_KM
        radius_km = min(radius_km, MAX_RADIUS_KM)
        page = max(page or 1, 1)
        limit = min(max(limit or DEFAULT_LIMIT, 1), MAX_LIMIT)
        filters = filters or ProductFilters()

        nearby = self.sellers_within(latitude, longitude, radius_km)
        if not nearby:
            logger.info(f"No sellers within {radius_km}km of ({latitude}, {longitude})")
            return NearbyProductsPage(current_page=page)

        items, total = self.products.find_active_by_sellers(
            list(nearby.keys()), filters, (page - 1) * limit, limit
        )
        results = []
        for item in items:
            seller, distance = nearby[item.seller_id]
            results.append(NearbyProduct(product=item, seller=seller, distance_km=distance))

        total_pages = math.ceil(total / limit) if total else 0
        logger.info(f"Nearby search: {len(nearby)} sellers, {total} products, page {page}/{total_pages}")
        return NearbyProductsPage(products=results, total=total, total_pages=total_pages, current_page=page)
