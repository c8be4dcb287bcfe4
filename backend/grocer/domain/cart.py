"""
Cart Domain Models

A cart is a customer's pending order draft. It holds products from a single
store; line quantities are always >= 1.
"""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, PrivateAttr

from grocer.core.exceptions import ConflictError, InvalidRequestError, NotFoundError
from grocer.domain.order import to_money
from grocer.domain.product import Product


class CartItem(BaseModel):
    id: int = Field(..., description="Cart line ID")
    product_id: int
    name: str
    price: Decimal = Field(..., ge=0)
    unit: str
    quantity: int = Field(..., ge=1)
    image_url: Optional[str] = None

    @property
    def line_total(self) -> Decimal:
        return to_money(self.price * self.quantity)

    def to_dict(self) -> dict:
        data = self.model_dump()
        data["price"] = float(self.price)
        data["line_total"] = float(self.line_total)
        return data


class Cart(BaseModel):
    """Per-user cart"""

    user_id: int
    store_id: Optional[int] = None
    items: List[CartItem] = Field(default_factory=list)

    _next_item_id: int = PrivateAttr(default=1)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> Decimal:
        return to_money(sum((item.line_total for item in self.items), Decimal("0")))

    def find_item(self, item_id: int) -> CartItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise NotFoundError("Cart item not found")

    def add_item(self, product: Product, quantity: int = 1, replace_cart: bool = False) -> CartItem:
        """
        Add a product, merging with an existing line for the same product

        Raises:
            InvalidRequestError: inactive product, bad quantity or not enough stock
            ConflictError: product from another store while replace_cart is False
        """
        if quantity < 1:
            raise InvalidRequestError("Quantity must be at least 1")
        if not product.is_active:
            raise InvalidRequestError(f"Product {product.name} is not available")

        if self.store_id is not None and self.store_id != product.store_id and self.items:
            if not replace_cart:
                raise ConflictError(
                    "Your cart contains items from another store. Clear cart to add this item.",
                    cart_store_id=self.store_id,
                )
            self.clear()

        existing = next((item for item in self.items if item.product_id == product.id), None)
        new_quantity = quantity + (existing.quantity if existing else 0)
        if new_quantity > product.stock:
            raise InvalidRequestError(
                f"Only {product.stock} {product.unit} of {product.name} in stock"
            )

        self.store_id = product.store_id

        if existing:
            existing.quantity = new_quantity
            existing.price = product.price
            return existing

        item = CartItem(
            id=self._next_item_id,
            product_id=product.id,
            name=product.name,
            price=product.price,
            unit=product.unit,
            quantity=quantity,
            image_url=product.image_url,
        )
        self._next_item_id += 1
        self.items.append(item)
        return item

    def update_quantity(self, item_id: int, quantity: int, available: Optional[int] = None) -> Optional[CartItem]:
        """Set a line's quantity; anything below 1 removes the line (returns None)"""
        item = self.find_item(item_id)
        if quantity < 1:
            self.remove_item(item_id)
            return None
        if available is not None and quantity > available:
            raise InvalidRequestError(f"Only {available} {item.unit} of {item.name} in stock")
        item.quantity = quantity
        return item

    def remove_item(self, item_id: int) -> None:
        item = self.find_item(item_id)
        self.items.remove(item)
        if not self.items:
            self.store_id = None

    def clear(self) -> None:
        self.items = []
        self.store_id = None

    def to_dict(self, delivery_fee: Decimal = Decimal("0")) -> dict:
        """Cart with derived totals; the fee only applies to a non-empty cart"""
        fee = to_money(delivery_fee) if self.items else to_money(0)
        subtotal = self.subtotal
        return {
            "store_id": self.store_id,
            "items": [item.to_dict() for item in self.items],
            "item_count": self.item_count,
            "subtotal": float(subtotal),
            "delivery_fee": float(fee),
            "total": float(subtotal + fee),
        }
