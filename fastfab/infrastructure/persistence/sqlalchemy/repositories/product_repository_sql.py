from typing import List, Sequence, Tuple
from sqlalchemy import func, or_
from sqlmodel import Session, select

from .....db.models import Product, Seller
from .....application.ports.product_repo import (
    ProductRepository, ProductDto, ProductFilters, SellerLocationDto,
)
from .....utils import as_utc


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqlProductRepository(ProductRepository):
    def __init__(self, session: Session):
        self.session = session

    def list_seller_locations(self) -> List[SellerLocationDto]:
        sellers = self.session.exec(
            select(Seller).where(Seller.latitude.is_not(None), Seller.longitude.is_not(None))
        ).all()
        return [
            SellerLocationDto(
                id=s.id,
                shop_name=s.shop_name,
                city=s.city,
                state=s.state,
                latitude=s.latitude,
                longitude=s.longitude,
            )
            for s in sellers
        ]

    def _conditions(self, seller_ids: Sequence[str], filters: ProductFilters) -> list:
        conditions = [Product.is_active == True, Product.seller_id.in_(list(seller_ids))]  # noqa: E712
        if filters.category:
            conditions.append(Product.category == filters.category)
        if filters.subcategory:
            conditions.append(Product.subcategory == filters.subcategory)
        if filters.min_price is not None:
            conditions.append(Product.selling_price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Product.selling_price <= filters.max_price)
        if filters.search:
            pattern = f"%{_escape_like(filters.search)}%"
            conditions.append(or_(
                Product.name.ilike(pattern, escape="\\"),
                Product.description.ilike(pattern, escape="\\"),
            ))
        return conditions

    def find_active_by_sellers(self, seller_ids: Sequence[str], filters: ProductFilters, offset: int, limit: int) -> Tuple[List[ProductDto], int]:
        conditions = self._conditions(seller_ids, filters)
        total = self.session.exec(select(func.count()).select_from(Product).where(*conditions)).one()
        rows = self.session.exec(
            select(Product)
            .where(*conditions)
            .order_by(Product.created_at.desc())
            .offset(offset)
            .limit(limit)
        ).all()
        items = [
            ProductDto(
                id=p.id,
                seller_id=p.seller_id,
                name=p.name,
                description=p.description,
                category=p.category,
                subcategory=p.subcategory,
                selling_price=p.selling_price,
                created_at=as_utc(p.created_at),
            )
            for p in rows
        ]
        return items, int(total)
