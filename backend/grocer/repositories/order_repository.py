"""
Order Repository - Data Access Layer for Orders

Orders and their items live in separate tables; reads attach the items.
Reviews are stored alongside since they are keyed by order.
"""
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from grocer.domain.order import Order, OrderItem, OrderStatus, Review
from grocer.repositories.base_repository import BaseRepository


class OrderRepository(BaseRepository[Order]):
    """
    Repository for Order data access

    Returns Order domain models with their items.
    """

    table_name = "orders"
    model = Order

    @property
    def item_rows(self) -> Dict[int, OrderItem]:
        return self.db.table("order_items")

    @property
    def review_rows(self) -> Dict[int, Review]:
        return self.db.table("reviews")

    def _with_items(self, order: Order) -> Order:
        order.items = self.find_items(order.id)
        return order

    def find_by_id(self, order_id: int) -> Optional[Order]:
        """
        Find order by ID with items

        Returns:
            Order with items or None if not found
        """
        order = super().find_by_id(order_id)
        return self._with_items(order) if order else None

    def find_items(self, order_id: int) -> List[OrderItem]:
        return [
            self.item_rows[item_id].model_copy(deep=True)
            for item_id in sorted(self.item_rows)
            if self.item_rows[item_id].order_id == order_id
        ]

    def find_all(
        self,
        user_id: Optional[int] = None,
        store_id: Optional[int] = None,
        store_ids: Optional[Iterable[int]] = None,
        status: Optional[OrderStatus] = None
    ) -> List[Order]:
        """
        Find orders with filters, newest first

        Args:
            user_id: Orders placed by this customer
            store_id: Orders for this store
            store_ids: Orders for any of these stores
            status: Filter by order status
        """
        orders = self._all()

        if user_id is not None:
            orders = [o for o in orders if o.user_id == user_id]

        if store_id is not None:
            orders = [o for o in orders if o.store_id == store_id]

        if store_ids is not None:
            allowed = set(store_ids)
            orders = [o for o in orders if o.store_id in allowed]

        if status is not None:
            orders = [o for o in orders if o.status == status]

        orders.sort(key=lambda o: (o.created_at, o.id), reverse=True)
        return [self._with_items(o) for o in orders]

    def create(
        self,
        user_id: int,
        store_id: int,
        delivery_address: str,
        lines: List[dict],
        delivery_fee: Decimal,
        subtotal: Decimal,
        total_amount: Decimal,
        created_at: datetime,
        estimated_delivery: datetime
    ) -> Order:
        """
        Insert an order and its items

        Args:
            lines: dicts with product_id, product_name, quantity and price
        """
        order = self._insert(
            user_id=user_id,
            store_id=store_id,
            status=OrderStatus.PENDING,
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            total_amount=total_amount,
            delivery_address=delivery_address,
            created_at=created_at,
            estimated_delivery=estimated_delivery,
        )

        for line in lines:
            item_id = self.db.next_id("order_items")
            self.item_rows[item_id] = OrderItem(id=item_id, order_id=order.id, **line)

        return self._with_items(order)

    def update_status(self, order_id: int, status: OrderStatus, updated_at: datetime) -> Optional[Order]:
        order = self._update(order_id, {"status": status, "updated_at": updated_at})
        return self._with_items(order) if order else None

    def mark_reviewed(self, order_id: int) -> Optional[Order]:
        order = self._update(order_id, {"reviewed": True})
        return self._with_items(order) if order else None

    def create_review(
        self,
        order: Order,
        rating: int,
        comment: str,
        created_at: datetime
    ) -> Review:
        review_id = self.db.next_id("reviews")
        review = Review(
            id=review_id,
            order_id=order.id,
            store_id=order.store_id,
            user_id=order.user_id,
            rating=rating,
            comment=comment,
            created_at=created_at,
        )
        self.review_rows[review_id] = review
        return review.model_copy(deep=True)

    def find_reviews_by_store(self, store_id: int) -> List[Review]:
        return [
            self.review_rows[rid].model_copy(deep=True)
            for rid in sorted(self.review_rows)
            if self.review_rows[rid].store_id == store_id
        ]
