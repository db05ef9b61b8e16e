import math
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional
from uuid import UUID

from pydantic import field_validator, model_validator

from peterparts.models.product import Brand
from peterparts.schemas.user import CamelModel


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def normalize_price(value: Any) -> Decimal:
    """
    Coerce a price given as a finite number or a non-empty numeric string.

    Raises:
        ValueError: If the value cannot represent a price.
    """
    if isinstance(value, bool):
        raise ValueError("price must be a number or numeric string")
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError("price must be finite")
        return value
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ValueError("price must be finite")
        return Decimal(str(value))
    if isinstance(value, str) and value.strip():
        try:
            price = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError("price must be a number or numeric string")
        if not price.is_finite():
            raise ValueError("price must be finite")
        return price
    raise ValueError("price must be a number or numeric string")


def normalize_stock(value: Any, allow_negative: bool = False) -> int:
    """
    Coerce a stock level given as a number (truncated) or an integer string.

    Raises:
        ValueError: If the value is not an integer, or is negative and
            ``allow_negative`` is false.
    """
    if isinstance(value, bool):
        raise ValueError("stock must be an integer")
    if isinstance(value, int):
        stock = value
    elif isinstance(value, float) and math.isfinite(value):
        stock = math.trunc(value)
    elif isinstance(value, str) and _LEADING_INT.match(value):
        stock = int(_LEADING_INT.match(value).group(1))
    else:
        raise ValueError("stock must be an integer")
    if stock < 0 and not allow_negative:
        raise ValueError("stock cannot be negative")
    return stock


def normalize_images(value: Any) -> List[str]:
    """Accept only a list whose every item is a string."""
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError("images must be a list of strings")
    return list(value)


class ProductBase(CamelModel):
    """Base product schema with common fields."""
    gear_id: str
    title: str
    description: str
    brand: Brand
    category: str
    price: Decimal
    images: List[str]


class ProductCreate(ProductBase):
    """
    Schema for creating a product.

    ``stock`` is validated when present but the stored stock always starts
    at zero.
    """
    stock: Optional[int] = None

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value: Any) -> Decimal:
        return normalize_price(value)

    @field_validator("images", mode="before")
    @classmethod
    def _images(cls, value: Any) -> List[str]:
        return normalize_images(value)

    @field_validator("stock", mode="before")
    @classmethod
    def _stock(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        return normalize_stock(value, allow_negative=True)


class ProductUpdate(CamelModel):
    """Schema for a partial product update. Only fields sent are applied."""
    gear_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    brand: Optional[Brand] = None
    category: Optional[str] = None
    price: Optional[Decimal] = None
    images: Optional[List[str]] = None
    stock: Optional[int] = None

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value: Any) -> Optional[Decimal]:
        return None if value is None else normalize_price(value)

    @field_validator("images", mode="before")
    @classmethod
    def _images(cls, value: Any) -> Optional[List[str]]:
        return None if value is None else normalize_images(value)

    @field_validator("stock", mode="before")
    @classmethod
    def _stock(cls, value: Any) -> Optional[int]:
        return None if value is None else normalize_stock(value)

    @model_validator(mode="after")
    def _no_explicit_nulls(self) -> "ProductUpdate":
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Fields the caller actually sent, keyed by column name."""
        return self.model_dump(exclude_unset=True)


class ProductResponse(ProductBase):
    """Schema for product response to client."""
    id: UUID
    stock: int
    created_at: datetime
    updated_at: datetime
