# fastfab/routers/products_router.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..application.ports.product_repo import ProductFilters
from ..application.services.nearby_service import DEFAULT_LIMIT, NearbyProductsService
from ..dependencies import get_nearby_service
from ..schemas import ErrorResponse, NearbyProductItem, NearbyProductsResponse, NearbySeller

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])


def _to_float(value: Optional[str]) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _to_int(value: Optional[str], default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@router.get("/nearby", response_model=NearbyProductsResponse, responses={400: {"model": ErrorResponse}})
def nearby_products(
    latitude: Optional[str] = Query(None),
    longitude: Optional[str] = Query(None),
    radius: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    subcategory: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    minPrice: Optional[str] = Query(None),
    maxPrice: Optional[str] = Query(None),
    service: NearbyProductsService = Depends(get_nearby_service),
):
    filters = ProductFilters(
        category=category or None,
        subcategory=subcategory or None,
        search=search or None,
        min_price=_to_float(minPrice),
        max_price=_to_float(maxPrice),
    )
    result = service.search(
        _to_float(latitude),
        _to_float(longitude),
        radius_km=_to_float(radius),
        page=_to_int(page, 1),
        limit=_to_int(limit, DEFAULT_LIMIT),
        filters=filters,
    )

    items = []
    for entry in result.products:
        product, seller = entry.product, entry.seller
        items.append(NearbyProductItem(
            id=product.id,
            sellerId=product.seller_id,
            name=product.name,
            description=product.description,
            category=product.category,
            subcategory=product.subcategory,
            sellingPrice=product.selling_price,
            createdAt=product.created_at,
            distance=entry.distance_km,
            seller=NearbySeller(
                id=seller.id,
                shopName=seller.shop_name,
                city=seller.city,
                state=seller.state,
                latitude=seller.latitude,
                longitude=seller.longitude,
                distance=entry.distance_km,
            ),
        ))

    return NearbyProductsResponse(
        products=items,
        totalProducts=result.total,
        totalPages=result.total_pages,
        currentPage=result.current_page,
    )
