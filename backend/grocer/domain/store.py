"""
Store Domain Models

A store belongs to one vendor and carries the delivery terms used when
pricing carts and orders.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from decimal import Decimal


class Store(BaseModel):
    """
    Store domain model

    Fields:
        id: Internal store ID
        vendor_id: Owning vendor (User.id)
        name: Store name
        description: Store description (optional)
        image_url: Banner image (optional)
        address: Street address
        location: Coordinates as "lat,long"
        rating: Mean review rating (0-5)
        review_count: Number of reviews
        delivery_time: Human readable delivery window, e.g. "20-35 min"
        delivery_fee: Flat fee added to every order
        min_order: Minimum order subtotal
        opening_hours: e.g. "7AM - 10PM" (optional)
    """

    id: int = Field(..., description="Store ID")
    vendor_id: int = Field(..., description="Owning vendor ID")
    name: str = Field(..., description="Store name")
    description: Optional[str] = Field(None, description="Store description")
    image_url: Optional[str] = Field(None, description="Image URL")
    address: str = Field(..., description="Street address")
    location: str = Field(..., description="Coordinates as 'lat,long'")
    rating: float = Field(0, description="Average rating", ge=0, le=5)
    review_count: int = Field(0, description="Number of reviews", ge=0)
    delivery_time: str = Field(..., description="Delivery window")
    delivery_fee: Decimal = Field(..., description="Delivery fee", ge=0)
    min_order: Decimal = Field(Decimal("0"), description="Minimum order subtotal", ge=0)
    opening_hours: Optional[str] = Field(None, description="Opening hours")

    model_config = ConfigDict(from_attributes=True)

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on name or description"""
        needle = query.lower()
        if needle in self.name.lower():
            return True
        return bool(self.description) and needle in self.description.lower()

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion"""
        data = self.model_dump()
        data["delivery_fee"] = float(self.delivery_fee)
        data["min_order"] = float(self.min_order)
        return data


class StoreCreate(BaseModel):
    """Schema for creating a store (vendor_id comes from the caller)"""
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    address: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    delivery_time: str = Field(..., min_length=1)
    delivery_fee: Decimal = Field(..., ge=0)
    min_order: Decimal = Field(Decimal("0"), ge=0)
    opening_hours: Optional[str] = None


class StoreUpdate(BaseModel):
    """Schema for updating an existing store"""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    address: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    delivery_time: Optional[str] = Field(None, min_length=1)
    delivery_fee: Optional[Decimal] = Field(None, ge=0)
    min_order: Optional[Decimal] = Field(None, ge=0)
    opening_hours: Optional[str] = None
