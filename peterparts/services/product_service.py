import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from peterparts.models.product import Product
from peterparts.schemas.product import ProductCreate


logger = logging.getLogger(__name__)


class ProductService:
    """
    Service class for catalog CRUD.

    Lookups that match no row return None (or False for deletes); callers
    turn that into a 404.
    """

    @staticmethod
    async def list_products(db: AsyncSession) -> List[Product]:
        """All products, newest first. No pagination."""
        result = await db.execute(select(Product).order_by(Product.created_at.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def get_product(product_id: UUID, db: AsyncSession) -> Optional[Product]:
        result = await db.execute(select(Product).where(Product.id == product_id))
        return result.scalars().first()

    @staticmethod
    async def get_product_by_gear_id(gear_id: str, db: AsyncSession) -> Optional[Product]:
        result = await db.execute(select(Product).where(Product.gear_id == gear_id))
        return result.scalars().first()

    @staticmethod
    async def create_product(data: ProductCreate, db: AsyncSession) -> Product:
        """
        Create a product.

        The stored stock always starts at zero; a stock value in the payload
        is validated but not persisted.

        Args:
            data: Validated product payload.
            db: Database session.

        Returns:
            Product: The stored product.
        """
        product = Product(
            gear_id=data.gear_id,
            title=data.title,
            description=data.description,
            brand=data.brand,
            category=data.category,
            price=data.price,
            images=data.images,
            stock=0,
        )
        db.add(product)
        await db.commit()
        await db.refresh(product)

        logger.info(f"Created product {product.id} (gear {product.gear_id})")
        return product

    @staticmethod
    async def update_product(
        product_id: UUID,
        changes: Dict[str, Any],
        db: AsyncSession
    ) -> Optional[Product]:
        """
        Apply a partial update.

        Args:
            product_id: Product to update.
            changes: Column values to set.
            db: Database session.

        Returns:
            Optional[Product]: Updated product, or None if no product has this id.
        """
        product = await ProductService.get_product(product_id, db)
        if not product:
            return None

        for field, value in changes.items():
            setattr(product, field, value)
        await db.commit()
        await db.refresh(product)

        logger.info(f"Updated product {product_id}: {sorted(changes)}")
        return product

    @staticmethod
    async def delete_product(product_id: UUID, db: AsyncSession) -> bool:
        """
        Delete a product.

        Returns:
            bool: False if no product has this id.
        """
        product = await ProductService.get_product(product_id, db)
        if not product:
            return False

        await db.delete(product)
        await db.commit()

        logger.info(f"Deleted product {product_id}")
        return True
