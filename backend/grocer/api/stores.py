"""
Stores API Endpoints
Public store browsing and vendor store management
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from grocer.core.auth import require_vendor
from grocer.core.database import InMemoryDatabase, get_db
from grocer.domain.store import Store, StoreCreate, StoreUpdate
from grocer.domain.user import User
from grocer.repositories.order_repository import OrderRepository
from grocer.repositories.store_repository import StoreRepository

logger = logging.getLogger(__name__)

router = APIRouter()


def get_owned_store(repo: StoreRepository, store_id: int, vendor: User) -> Store:
    """Load a store and check the caller owns it (404, then 403)"""
    store = repo.find_by_id(store_id)
    if not store:
        raise HTTPException(status_code=404, detail=f"Store {store_id} not found")
    if store.vendor_id != vendor.id:
        logger.warning(f"Vendor {vendor.id} tried to modify store {store_id} owned by {store.vendor_id}")
        raise HTTPException(status_code=403, detail="You can only manage your own stores")
    return store


@router.get("")
async def get_stores(
    search: Optional[str] = Query(None, description="Search by name or description"),
    vendor_id: Optional[int] = Query(None, description="Filter by owning vendor"),
    db: InMemoryDatabase = Depends(get_db)
):
    """
    Get all stores with optional filters

    Returns stores ordered by id
    """
    try:
        stores = StoreRepository(db).find_all(search=search, vendor_id=vendor_id)
        return {
            "status": "success",
            "count": len(stores),
            "data": [store.to_dict() for store in stores]
        }

    except Exception as e:
        logger.exception("Error fetching stores")
        raise HTTPException(status_code=500, detail=f"Error fetching stores: {str(e)}")


@router.get("/{store_id}")
async def get_store(store_id: int, db: InMemoryDatabase = Depends(get_db)):
    store = StoreRepository(db).find_by_id(store_id)
    if not store:
        raise HTTPException(status_code=404, detail=f"Store {store_id} not found")
    return {"status": "success", "data": store.to_dict()}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_store(
    store_data: StoreCreate,
    vendor: User = Depends(require_vendor),
    db: InMemoryDatabase = Depends(get_db)
):
    """Create a store owned by the calling vendor"""
    store = StoreRepository(db).create(vendor.id, store_data)
    logger.info(f"Vendor {vendor.id} created store {store.id} '{store.name}'")
    return {"status": "success", "data": store.to_dict()}


@router.put("/{store_id}")
async def update_store(
    store_id: int,
    store_data: StoreUpdate,
    vendor: User = Depends(require_vendor),
    db: InMemoryDatabase = Depends(get_db)
):
    """Partial update: only fields present in the body change"""
    repo = StoreRepository(db)
    get_owned_store(repo, store_id, vendor)
    store = repo.update(store_id, store_data)
    logger.info(f"Store {store_id} updated: {sorted(store_data.model_fields_set)}")
    return {"status": "success", "data": store.to_dict()}


@router.delete("/{store_id}")
async def delete_store(
    store_id: int,
    vendor: User = Depends(require_vendor),
    db: InMemoryDatabase = Depends(get_db)
):
    """Delete a store along with its products, orders and reviews"""
    repo = StoreRepository(db)
    get_owned_store(repo, store_id, vendor)
    repo.delete(store_id)
    return {"status": "success", "message": "Store deleted successfully"}


@router.get("/{store_id}/reviews")
async def get_store_reviews(store_id: int, db: InMemoryDatabase = Depends(get_db)):
    """Customer reviews of a store, oldest first"""
    if not StoreRepository(db).exists(store_id):
        raise HTTPException(status_code=404, detail=f"Store {store_id} not found")
    reviews = OrderRepository(db).find_reviews_by_store(store_id)
    return {
        "status": "success",
        "count": len(reviews),
        "data": [review.to_dict() for review in reviews]
    }
