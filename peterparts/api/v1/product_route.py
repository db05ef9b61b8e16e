"""
Product catalog endpoints.

Plain CRUD over products; no authentication is required.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from peterparts.db.session import get_db
from peterparts.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from peterparts.services.product_service import ProductService


logger = logging.getLogger(__name__)

products_router = APIRouter()


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")


def _parse_id(product_id: str) -> UUID:
    try:
        return UUID(product_id)
    except ValueError:
        # an id that cannot exist matches no row
        raise _not_found()


@products_router.get("", response_model=List[ProductResponse])
async def list_products(db: AsyncSession = Depends(get_db)):
    """
    List all products, newest first.

    Returns:
        List[ProductResponse]: Every product in the catalog.
    """
    try:
        return await ProductService.list_products(db)
    except Exception as e:
        logger.exception(f"Failed to list products: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list products",
        )


@products_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, db: AsyncSession = Depends(get_db)):
    """Fetch one product by id."""
    product_uuid = _parse_id(product_id)
    try:
        product = await ProductService.get_product(product_uuid, db)
    except Exception as e:
        logger.exception(f"Failed to fetch product {product_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch product",
        )

    if not product:
        raise _not_found()
    return product


@products_router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(data: ProductCreate, db: AsyncSession = Depends(get_db)):
    """
    Create a product.

    New products always start with zero stock.

    Args:
        data: Validated product payload.
        db: Database session.

    Returns:
        ProductResponse: The created product.
    """
    try:
        return await ProductService.create_product(data, db)
    except Exception as e:
        logger.exception(f"Failed to create product {data.gear_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create product",
        )


@products_router.put("/{product_id}", response_model=ProductResponse)
async def update_product(product_id: str, data: ProductUpdate, db: AsyncSession = Depends(get_db)):
    """
    Update the fields present in the payload.

    Raises:
        HTTPException: 400 when the payload is empty, 404 for an unknown id.
    """
    changes = data.changes()
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    product_uuid = _parse_id(product_id)
    try:
        product = await ProductService.update_product(product_uuid, changes, db)
    except Exception as e:
        logger.exception(f"Failed to update product {product_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update product",
        )

    if not product:
        raise _not_found()
    return product


@products_router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: str, db: AsyncSession = Depends(get_db)):
    """Delete a product."""
    product_uuid = _parse_id(product_id)
    try:
        deleted = await ProductService.delete_product(product_uuid, db)
    except Exception as e:
        logger.exception(f"Failed to delete product {product_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete product",
        )

    if not deleted:
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
