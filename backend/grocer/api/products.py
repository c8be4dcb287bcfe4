"""
Products API Endpoints
Handles catalog queries and vendor product management
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from grocer.api.stores import get_owned_store
from grocer.core.auth import require_vendor
from grocer.core.database import InMemoryDatabase, get_db
from grocer.domain.product import Product, ProductCreate, ProductUpdate
from grocer.domain.user import User
from grocer.repositories.category_repository import CategoryRepository
from grocer.repositories.product_repository import ProductRepository
from grocer.repositories.store_repository import StoreRepository

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_category(db: InMemoryDatabase, category_id: Optional[int]) -> None:
    if category_id is not None and not CategoryRepository(db).exists(category_id):
        raise HTTPException(status_code=400, detail=f"Category {category_id} does not exist")


def _get_owned_product(db: InMemoryDatabase, product_id: int, vendor: User) -> Product:
    product = ProductRepository(db).find_by_id(product_id)
    if not product:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    get_owned_store(StoreRepository(db), product.store_id, vendor)
    return product


@router.get("")
async def get_products(
    store_id: Optional[int] = Query(None, description="Filter by store"),
    category_id: Optional[int] = Query(None, description="Filter by category"),
    vendor_id: Optional[int] = Query(None, description="Filter by the vendor owning the store"),
    search: Optional[str] = Query(None, description="Search by name or description"),
    is_active: Optional[bool] = Query(None, description="Filter by active status"),
    db: InMemoryDatabase = Depends(get_db)
):
    """
    Get all products with optional filters

    Filters combine with AND.
    """
    try:
        store_ids = StoreRepository(db).find_ids_by_vendor(vendor_id) if vendor_id is not None else None

        products = ProductRepository(db).find_all(
            store_id=store_id,
            store_ids=store_ids,
            category_id=category_id,
            search=search,
            is_active=is_active
        )

        return {
            "status": "success",
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except Exception as e:
        logger.exception("Error fetching products")
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/{product_id}")
async def get_product(product_id: int, db: InMemoryDatabase = Depends(get_db)):
    """Get a single product by ID"""
    product = ProductRepository(db).find_by_id(product_id)
    if not product:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return {"status": "success", "data": product.to_dict()}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    vendor: User = Depends(require_vendor),
    db: InMemoryDatabase = Depends(get_db)
):
    """Add a product to one of the caller's stores"""
    get_owned_store(StoreRepository(db), product_data.store_id, vendor)
    _check_category(db, product_data.category_id)

    product = ProductRepository(db).create(product_data)
    logger.info(f"Product {product.id} '{product.name}' added to store {product.store_id}")
    return {"status": "success", "data": product.to_dict()}


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    product_data: ProductUpdate,
    vendor: User = Depends(require_vendor),
    db: InMemoryDatabase = Depends(get_db)
):
    """Partial update; moving a product requires owning the target store too"""
    _get_owned_product(db, product_id, vendor)
    if product_data.store_id is not None:
        get_owned_store(StoreRepository(db), product_data.store_id, vendor)
    if "category_id" in product_data.model_fields_set:
        _check_category(db, product_data.category_id)

    product = ProductRepository(db).update(product_id, product_data)
    logger.info(f"Product {product_id} updated: {sorted(product_data.model_fields_set)}")
    return {"status": "success", "data": product.to_dict()}


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: int,
    vendor: User = Depends(require_vendor),
    db: InMemoryDatabase = Depends(get_db)
):
    _get_owned_product(db, product_id, vendor)
    ProductRepository(db).delete(product_id)
    logger.info(f"Product {product_id} deleted by vendor {vendor.id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
