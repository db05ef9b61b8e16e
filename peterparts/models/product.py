import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, Integer, JSON, Numeric, String, Text, Uuid
from sqlalchemy.sql import func

from peterparts.db.base import Base


class Brand(str, enum.Enum):
    """Brands carried by the catalog."""
    CUISINART = "Cuisinart"
    KITCHENAID = "Kitchenaid"


class Product(Base):
    """Catalog item, identified externally by its gear id."""

    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    gear_id = Column(String, unique=True, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    brand = Column(Enum(Brand, name="brand"), nullable=False)
    category = Column(String, nullable=False)
    price = Column(Numeric(precision=10, scale=2), nullable=False)
    images = Column(JSON, default=list, nullable=False)
    stock = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
