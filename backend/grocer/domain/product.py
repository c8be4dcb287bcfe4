"""
Product Domain Model

Represents a product sold by one store.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from decimal import Decimal


class Product(BaseModel):
    """
    Product domain model - an item in a store's catalog

    Fields:
        id: Internal product ID
        store_id: Store selling the product
        category_id: Catalog category (optional)
        name: Product name
        description: Product description (optional)
        price: Unit price
        unit: Unit description ("kg", "pack", "dozen", ...)
        image_url: Product image (optional)
        stock: Units available
        sku: Stock Keeping Unit (optional)
        is_active: Whether the product can be ordered
    """

    id: int = Field(..., description="Product ID")
    store_id: int = Field(..., description="Store ID")
    category_id: Optional[int] = Field(None, description="Category ID")
    name: str = Field(..., description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    price: Decimal = Field(..., description="Unit price", ge=0)
    unit: str = Field(..., description="Unit (kg, pack, ...)")
    image_url: Optional[str] = Field(None, description="Image URL")
    stock: int = Field(0, description="Units in stock", ge=0)
    sku: Optional[str] = Field(None, description="Stock Keeping Unit")
    is_active: bool = Field(True, description="Whether product is active")

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_out_of_stock(self) -> bool:
        """Check if product is out of stock"""
        return self.stock <= 0

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on name or description"""
        needle = query.lower()
        if needle in self.name.lower():
            return True
        return bool(self.description) and needle in self.description.lower()

    def to_dict(self) -> dict:
        """Convert to dictionary with computed fields"""
        data = self.model_dump()
        data["price"] = float(self.price)
        data["is_out_of_stock"] = self.is_out_of_stock
        return data


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    store_id: int
    category_id: Optional[int] = None
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    unit: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    stock: int = Field(0, ge=0)
    sku: Optional[str] = None
    is_active: bool = True


class ProductUpdate(BaseModel):
    """Schema for updating an existing product"""
    store_id: Optional[int] = None
    category_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1)
    image_url: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    sku: Optional[str] = None
    is_active: Optional[bool] = None
