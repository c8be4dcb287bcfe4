"""
Cart API Endpoints
Server-side cart of the authenticated user
"""
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from grocer.api.deps import get_cart_service
from grocer.core.auth import get_current_user
from grocer.domain.user import User
from grocer.services.cart_service import CartService

router = APIRouter()


# Request models
class CartItemAdd(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1)
    replace_cart: bool = Field(False, description="Clear a cart holding another store's items first")


class CartItemQuantity(BaseModel):
    quantity: int = Field(..., description="New quantity; below 1 removes the line")


class CheckoutRequest(BaseModel):
    delivery_address: Optional[str] = None


def _cart_response(service: CartService, user: User) -> dict:
    return {"status": "success", "data": service.summary(user)}


@router.get("")
async def get_cart(
    user: User = Depends(get_current_user),
    service: CartService = Depends(get_cart_service)
):
    """Cart with item_count, subtotal, delivery_fee and total"""
    return _cart_response(service, user)


@router.post("/items", status_code=status.HTTP_201_CREATED)
async def add_cart_item(
    item: CartItemAdd,
    user: User = Depends(get_current_user),
    service: CartService = Depends(get_cart_service)
):
    service.add_item(user, item.product_id, item.quantity, replace_cart=item.replace_cart)
    return _cart_response(service, user)


@router.patch("/items/{item_id}")
async def update_cart_item(
    item_id: int,
    update: CartItemQuantity,
    user: User = Depends(get_current_user),
    service: CartService = Depends(get_cart_service)
):
    service.update_item(user, item_id, update.quantity)
    return _cart_response(service, user)


@router.delete("/items/{item_id}")
async def remove_cart_item(
    item_id: int,
    user: User = Depends(get_current_user),
    service: CartService = Depends(get_cart_service)
):
    service.remove_item(user, item_id)
    return _cart_response(service, user)


@router.delete("")
async def clear_cart(
    user: User = Depends(get_current_user),
    service: CartService = Depends(get_cart_service)
):
    service.clear(user)
    return _cart_response(service, user)


@router.post("/checkout", status_code=status.HTTP_201_CREATED)
async def checkout(
    body: Optional[CheckoutRequest] = None,
    user: User = Depends(get_current_user),
    service: CartService = Depends(get_cart_service)
):
    """
    Place an order from the cart

    The delivery address falls back to the profile address.
    """
    order = service.checkout(user, body.delivery_address if body else None)
    return {"status": "success", "data": order.to_dict()}
