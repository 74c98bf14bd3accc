# fastfab/db/models/catalog/product.py
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from ....utils import utcnow

class Product(SQLModel, table=True):
    __tablename__ = "products"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    seller_id: str = Field(foreign_key="sellers.id", index=True)
    name: str = Field(max_length=200)
    description: Optional[str] = Field(default=None)
    category: Optional[str] = Field(max_length=100, default=None, index=True)
    subcategory: Optional[str] = Field(max_length=100, default=None)
    selling_price: float = Field(default=0.0)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
