"""
Order Domain Models

Orders, their line items and the order lifecycle rules:
- forward-only status progression for vendors
- cancellation while pending, within a wall-clock window from creation
- estimated delivery and the customer-facing tracking timeline
"""
import math
import random
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

from grocer.core.exceptions import InvalidRequestError, OrderNotCancellableError


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Vendor-driven progression; cancelled is reachable only through cancellation
STATUS_PROGRESSION = [
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]
TERMINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# Tracking timeline offsets from order creation
PROCESSING_AFTER = timedelta(minutes=5)
OUT_FOR_DELIVERY_AFTER = timedelta(minutes=15)

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(value).quantize(CENT)


def check_status_transition(current: OrderStatus, new: OrderStatus) -> None:
    """
    Validate a vendor status update

    Raises:
        InvalidRequestError if the move is not a forward step along
        pending -> processing -> out_for_delivery -> delivered
    """
    if new == OrderStatus.CANCELLED:
        raise InvalidRequestError("Orders can only be cancelled through the cancel endpoint")

    if current in TERMINAL_STATUSES:
        raise InvalidRequestError(f"Order is already {current.value} and cannot be updated")

    if STATUS_PROGRESSION.index(new) <= STATUS_PROGRESSION.index(current):
        raise InvalidRequestError(
            f"Cannot change order status from {current.value} to {new.value}"
        )


def estimate_delivery(
    created_at: datetime,
    base_minutes: int = 30,
    spread_minutes: int = 15,
    rng: Optional[random.Random] = None
) -> datetime:
    """Estimated delivery: base minutes plus a uniform random spread after creation"""
    rng = rng or random
    offset = base_minutes + rng.uniform(0, spread_minutes)
    return created_at + timedelta(minutes=offset)


class OrderItem(BaseModel):
    """
    Order Item domain model - a line item in an order

    Fields:
        id: Order item ID
        order_id: Parent order ID
        product_id: Product ordered
        product_name: Product name at order time
        quantity: Units ordered
        price: Unit price at order time
    """

    id: int = Field(..., description="Order item ID")
    order_id: int = Field(..., description="Parent order ID")
    product_id: int = Field(..., description="Product ID")
    product_name: str = Field(..., description="Product name at order time")
    quantity: int = Field(..., description="Quantity ordered", ge=1)
    price: Decimal = Field(..., description="Unit price at order time", ge=0)

    model_config = ConfigDict(from_attributes=True)

    @property
    def line_total(self) -> Decimal:
        return to_money(self.price * self.quantity)

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion"""
        data = self.model_dump()
        data["price"] = float(self.price)
        data["line_total"] = float(self.line_total)
        return data


class TrackingStep(BaseModel):
    id: str
    label: str
    description: str
    scheduled_at: datetime
    is_completed: bool


class OrderTracking(BaseModel):
    order_id: int
    status: OrderStatus
    current_step: int
    is_delayed: bool
    is_cancelled: bool
    estimated_delivery: datetime
    steps: List[TrackingStep]

    def to_dict(self) -> dict:
        return self.model_dump()


class Order(BaseModel):
    """
    Order domain model - a customer's purchase from one store

    Fields:
        id: Internal order ID
        user_id: Customer who placed the order
        store_id: Store fulfilling the order
        status: Lifecycle status
        subtotal: Sum of line totals
        delivery_fee: Store delivery fee at order time
        total_amount: subtotal + delivery_fee
        delivery_address: Where to deliver
        created_at: Placement timestamp (UTC)
        estimated_delivery: Estimated delivery timestamp (UTC)
        reviewed: Whether the customer reviewed the order
        updated_at: Last status change
        items: Line items
    """

    id: int = Field(..., description="Internal order ID")
    user_id: int = Field(..., description="Customer ID")
    store_id: int = Field(..., description="Store ID")
    status: OrderStatus = Field(OrderStatus.PENDING, description="Order status")

    subtotal: Decimal = Field(..., description="Subtotal", ge=0)
    delivery_fee: Decimal = Field(Decimal("0"), description="Delivery fee", ge=0)
    total_amount: Decimal = Field(..., description="Total order amount", ge=0)
    delivery_address: str = Field(..., description="Delivery address")

    created_at: datetime = Field(..., description="Creation timestamp")
    estimated_delivery: Optional[datetime] = Field(None, description="Estimated delivery")
    reviewed: bool = Field(False, description="Whether the order was reviewed")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    items: List[OrderItem] = Field(default_factory=list, description="Order items")

    model_config = ConfigDict(from_attributes=True)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def minutes_since_created(self, now: datetime) -> float:
        return (now - self.created_at).total_seconds() / 60

    def check_cancellable(self, now: datetime, window_minutes: int = 10) -> None:
        """
        Raise OrderNotCancellableError unless the order can be cancelled at `now`

        The window is inclusive: exactly `window_minutes` after creation is
        still cancellable.
        """
        elapsed = self.minutes_since_created(now)
        if elapsed > window_minutes:
            raise OrderNotCancellableError(
                f"Order cannot be cancelled after {window_minutes} minutes of placement",
                time_elapsed=math.floor(elapsed + 0.5),
            )

        if self.status != OrderStatus.PENDING:
            raise OrderNotCancellableError(
                f"Order cannot be cancelled once it is {self.status.value}"
            )

    def tracking(self, now: datetime) -> OrderTracking:
        """Build the customer-facing delivery timeline as seen at `now`"""
        processing_at = self.created_at + PROCESSING_AFTER
        out_for_delivery_at = self.created_at + OUT_FOR_DELIVERY_AFTER
        estimated = self.estimated_delivery or out_for_delivery_at
        cancelled = self.status == OrderStatus.CANCELLED
        delivered = self.status == OrderStatus.DELIVERED

        if cancelled:
            processing_done = out_done = False
        else:
            processing_done = self.status != OrderStatus.PENDING or now >= processing_at
            out_done = (
                self.status in (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED)
                or now >= out_for_delivery_at
            )
        is_delayed = not cancelled and not delivered and now >= estimated

        if delivered:
            delivered_description = "Your order has been delivered."
        elif is_delayed:
            delivered_description = "Your order is delayed. Please contact support."
        else:
            delivered_description = "Your order will be delivered to your address."

        steps = [
            TrackingStep(
                id="confirmed",
                label="Order Confirmed",
                description="Your order has been received by the store.",
                scheduled_at=self.created_at,
                is_completed=True,
            ),
            TrackingStep(
                id="processing",
                label="Order Processing",
                description="The store is preparing your items for delivery.",
                scheduled_at=processing_at,
                is_completed=processing_done,
            ),
            TrackingStep(
                id="out_for_delivery",
                label="Out for Delivery",
                description="Your order is on its way to you.",
                scheduled_at=out_for_delivery_at,
                is_completed=out_done,
            ),
            TrackingStep(
                id="delivered",
                label="Delivered",
                description=delivered_description,
                scheduled_at=estimated,
                is_completed=delivered,
            ),
        ]

        current_step = max(index for index, step in enumerate(steps) if step.is_completed)

        return OrderTracking(
            order_id=self.id,
            status=self.status,
            current_step=current_step,
            is_delayed=is_delayed,
            is_cancelled=cancelled,
            estimated_delivery=estimated,
            steps=steps,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion and items"""
        data = self.model_dump(exclude={"items"})
        for field in ["subtotal", "delivery_fee", "total_amount"]:
            data[field] = float(data[field])
        data["status"] = self.status.value
        data["item_count"] = self.item_count
        data["items"] = [item.to_dict() for item in self.items]
        return data


class OrderItemCreate(BaseModel):
    """Line item in an order request; price is taken from the catalog"""
    product_id: int
    quantity: int = Field(..., ge=1)
    price: Optional[Decimal] = Field(None, description="Ignored, catalog price is used")


class OrderCreate(BaseModel):
    """Schema for placing an order"""
    store_id: int
    delivery_address: Optional[str] = None
    items: List[OrderItemCreate] = Field(..., min_length=1)
    total_amount: Optional[Decimal] = Field(None, description="Ignored, computed server side")


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class Review(BaseModel):
    """Customer review of a delivered order"""

    id: int
    order_id: int
    store_id: int
    user_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return self.model_dump()


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str

    @field_validator("comment")
    @classmethod
    def comment_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please add a comment to your review")
        return value
