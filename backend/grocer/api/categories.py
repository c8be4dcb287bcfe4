"""
Categories API Endpoints
Read-only product categories
"""
from fastapi import APIRouter, Depends, HTTPException

from grocer.core.database import InMemoryDatabase, get_db
from grocer.repositories.category_repository import CategoryRepository

router = APIRouter()


@router.get("")
async def get_categories(db: InMemoryDatabase = Depends(get_db)):
    """Get all categories"""
    categories = CategoryRepository(db).find_all()
    return {
        "status": "success",
        "count": len(categories),
        "data": [category.to_dict() for category in categories]
    }


@router.get("/{category_id}")
async def get_category(category_id: int, db: InMemoryDatabase = Depends(get_db)):
    category = CategoryRepository(db).find_by_id(category_id)
    if not category:
        raise HTTPException(status_code=404, detail=f"Category {category_id} not found")
    return {"status": "success", "data": category.to_dict()}
