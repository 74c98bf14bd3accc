from datetime import datetime, timezone

import pytest

from fastfab.application.ports.product_repo import ProductDto, ProductFilters, ProductRepository, SellerLocationDto
from fastfab.application.services.nearby_service import MAX_LIMIT, MAX_RADIUS_KM, NearbyProductsService
from fastfab.exceptions import InvalidCoordinatesError
from fastfab.utils import haversine_km

ORIGIN = (12.9716, 77.5946)


class FakeProducts(ProductRepository):
    def __init__(self, sellers, products):
        self.sellers = sellers
        self.products = products
        self.calls = []

    def list_seller_locations(self):
        return self.sellers

    def find_active_by_sellers(self, seller_ids, filters, offset, limit):
        self.calls.append((sorted(seller_ids), filters, offset, limit))
        matched = [p for p in self.products if p.seller_id in seller_ids]
        return matched[offset:offset + limit], len(matched)


def seller(id, lat, lon):
    return SellerLocationDto(id=id, shop_name=id.title(), city="Bengaluru", state="KA", latitude=lat, longitude=lon)


def product(id, seller_id):
    return ProductDto(id=id, seller_id=seller_id, name=id, description=None, category=None,
                      subcategory=None, selling_price=100.0, created_at=datetime(2026, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def repo():
    sellers = [
        seller("near", 12.9750, 77.5946),   # ~0.4 km
        seller("edge", 12.9966, 77.5946),   # ~2.8 km
        seller("far", 13.0716, 77.5946),    # ~11 km
    ]
    products = [product(f"p{i}", "near") for i in range(5)] + [product("f1", "far")]
    return FakeProducts(sellers, products)


def test_haversine_matches_known_distance():
    # one degree of latitude is ~111.2 km
    assert haversine_km(0, 0, 1, 0) == pytest.approx(111.19, abs=0.01)
    assert haversine_km(*ORIGIN, *ORIGIN) == 0


def test_search_only_queries_sellers_in_radius(repo):
    page = NearbyProductsService(repo).search(*ORIGIN, radius_km=1)

    assert repo.calls[0][0] == ["near"]
    assert page.total == 5
    assert page.total_pages == 1
    assert all(item.seller.id == "near" for item in page.products)
    assert 0.3 < page.products[0].distance_km < 0.5


def test_radius_is_capped(repo):
    service = NearbyProductsService(repo)
    service.search(*ORIGIN, radius_km=50)
    assert "far" not in repo.calls[0][0]
    assert set(service.sellers_within(*ORIGIN, MAX_RADIUS_KM)) == {"near", "edge"}


def test_missing_radius_uses_default(repo):
    NearbyProductsService(repo).search(*ORIGIN)
    assert repo.calls[0][0] == ["edge", "near"]


def test_pagination(repo):
    page = NearbyProductsService(repo).search(*ORIGIN, page=2, limit=2)

    assert repo.calls[0][2:] == (2, 2)
    assert page.current_page == 2
    assert page.total_pages == 3
    assert [p.product.id for p in page.products] == ["p2", "p3"]


def test_page_and_limit_are_clamped(repo):
    NearbyProductsService(repo).search(*ORIGIN, page=0, limit=1000)
    assert repo.calls[0][2:] == (0, MAX_LIMIT)


def test_filters_are_passed_through(repo):
    filters = ProductFilters(category="clothing", max_price=500)
    NearbyProductsService(repo).search(*ORIGIN, filters=filters)
    assert repo.calls[0][1] is filters


def test_no_sellers_nearby_returns_empty_page(repo):
    page = NearbyProductsService(repo).search(28.6139, 77.2090, page=3)
    assert page.products == []
    assert page.total == 0
    assert page.current_page == 3
    assert repo.calls == []


@pytest.mark.parametrize("lat,lon", [(None, 77.5), (12.9, None), (91, 77.5), (12.9, -181), (float("nan"), 77.5)])
def test_invalid_coordinates(repo, lat, lon):
    with pytest.raises(InvalidCoordinatesError):
        NearbyProductsService(repo).search(lat, lon)
