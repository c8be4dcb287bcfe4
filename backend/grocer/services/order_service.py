"""
Order Service
Order placement and the order lifecycle

Handles:
- Validating order lines against the store catalog
- Pricing (catalog prices, store delivery fee, minimum order)
- Stock reservation on placement and release on cancellation
- Vendor status updates, customer cancellation, reviews and tracking
"""
import logging
import random
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple

from grocer.core.clock import utc_now
from grocer.core.config import Settings
from grocer.core.database import InMemoryDatabase
from grocer.core.exceptions import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    PermissionDeniedError,
)
from grocer.domain.order import (
    Order,
    OrderCreate,
    OrderStatus,
    OrderTracking,
    Review,
    ReviewCreate,
    check_status_transition,
    estimate_delivery,
    to_money,
)
from grocer.domain.user import User
from grocer.repositories.order_repository import OrderRepository
from grocer.repositories.product_repository import ProductRepository
from grocer.repositories.store_repository import StoreRepository

logger = logging.getLogger(__name__)


class OrderService:
    """
    Service for the order lifecycle

    The clock and random source are injectable so the cancellation window
    and delivery estimates can be tested deterministically.
    """

    def __init__(
        self,
        db: InMemoryDatabase,
        settings: Settings,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None
    ):
        self.db = db
        self.settings = settings
        self.clock = clock or utc_now
        self.rng = rng or random.Random()
        self.orders = OrderRepository(db)
        self.products = ProductRepository(db)
        self.stores = StoreRepository(db)

    # -------------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------------

    def place_order(self, user: User, order_data: OrderCreate, delivery_address: Optional[str] = None) -> Order:
        """
        Place an order for `user`

        Args:
            user: Customer placing the order
            order_data: Store and requested lines
            delivery_address: Overrides order_data.delivery_address

        Returns:
            The created order with items

        Raises:
            NotFoundError: unknown store
            InvalidRequestError: bad lines, stock, minimum order or address
        """
        store = self.stores.find_by_id(order_data.store_id)
        if not store:
            raise NotFoundError("Store not found")

        address = (delivery_address or order_data.delivery_address or user.address or "").strip()
        if not address:
            raise InvalidRequestError("Delivery address is required")

        # Merge repeated products into one line
        quantities: Dict[int, int] = {}
        for item in order_data.items:
            quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity

        lines: List[dict] = []
        for product_id, quantity in quantities.items():
            product = self.products.find_by_id(product_id)
            if not product or product.store_id != store.id:
                raise InvalidRequestError(f"Product {product_id} is not sold by {store.name}")
            if not product.is_active:
                raise InvalidRequestError(f"Product {product.name} is not available")
            if quantity > product.stock:
                raise InvalidRequestError(
                    f"Only {product.stock} {product.unit} of {product.name} in stock"
                )
            lines.append({
                "product_id": product.id,
                "product_name": product.name,
                "quantity": quantity,
                "price": product.price,
            })

        subtotal = to_money(sum((line["price"] * line["quantity"] for line in lines), Decimal("0")))
        if subtotal < store.min_order:
            raise InvalidRequestError(
                f"Minimum order for {store.name} is {float(store.min_order):.2f}",
                min_order=float(store.min_order),
                subtotal=float(subtotal),
            )

        delivery_fee = to_money(store.delivery_fee)
        now = self.clock()

        for line in lines:
            self.products.adjust_stock(line["product_id"], -line["quantity"])

        order = self.orders.create(
            user_id=user.id,
            store_id=store.id,
            delivery_address=address,
            lines=lines,
            delivery_fee=delivery_fee,
            subtotal=subtotal,
            total_amount=subtotal + delivery_fee,
            created_at=now,
            estimated_delivery=estimate_delivery(
                now,
                self.settings.DELIVERY_ESTIMATE_BASE_MINUTES,
                self.settings.DELIVERY_ESTIMATE_SPREAD_MINUTES,
                self.rng,
            ),
        )

        logger.info(
            f"Order {order.id} placed by user {user.id} at store {store.id}: "
            f"{order.item_count} items, total {order.total_amount}"
        )
        return order

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def _load(self, order_id: int) -> Order:
        order = self.orders.find_by_id(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def _owns_store(self, user: User, store_id: int) -> bool:
        store = self.stores.find_by_id(store_id)
        return bool(store and user.is_vendor and store.vendor_id == user.id)

    def get_order(self, user: User, order_id: int) -> Order:
        """Order visible to its customer and to the vendor of its store"""
        order = self._load(order_id)
        if order.user_id != user.id and not self._owns_store(user, order.store_id):
            raise PermissionDeniedError("You do not have access to this order")
        return order

    def list_orders(
        self,
        user: User,
        store_id: Optional[int] = None,
        vendor: bool = False,
        status: Optional[OrderStatus] = None
    ) -> List[Order]:
        """
        Orders visible to `user`

        - store_id: that store's orders (owning vendor only)
        - vendor: orders across all of the caller's stores
        - otherwise: orders the caller placed
        """
        if store_id is not None:
            if not self.stores.exists(store_id):
                raise NotFoundError("Store not found")
            if not self._owns_store(user, store_id):
                raise PermissionDeniedError("You can only view orders for your own stores")
            return self.orders.find_all(store_id=store_id, status=status)

        if vendor:
            if not user.is_vendor:
                raise PermissionDeniedError("Vendor account required")
            return self.orders.find_all(
                store_ids=self.stores.find_ids_by_vendor(user.id),
                status=status,
            )

        return self.orders.find_all(user_id=user.id, status=status)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def update_status(self, user: User, order_id: int, new_status: OrderStatus) -> Order:
        """Vendor moves an order forward along the delivery progression"""
        order = self._load(order_id)
        if not self._owns_store(user, order.store_id):
            raise PermissionDeniedError("Only the store's vendor can update this order")

        try:
            check_status_transition(order.status, new_status)
        except InvalidRequestError:
            logger.warning(
                f"Rejected status change for order {order_id}: {order.status.value} -> {new_status.value}"
            )
            raise

        updated = self.orders.update_status(order_id, new_status, self.clock())
        logger.info(f"Order {order_id} status: {order.status.value} -> {new_status.value}")
        return updated

    def cancel_order(self, user: User, order_id: int) -> Order:
        """
        Customer cancels a pending order within the cancellation window

        Reserved stock goes back to products that still exist.
        """
        order = self._load(order_id)
        if order.user_id != user.id:
            raise PermissionDeniedError("You can only cancel your own orders")

        now = self.clock()
        try:
            order.check_cancellable(now, self.settings.CANCELLATION_WINDOW_MINUTES)
        except InvalidRequestError as e:
            logger.warning(f"Cancellation of order {order_id} rejected: {e}")
            raise

        for item in order.items:
            if self.products.exists(item.product_id):
                self.products.adjust_stock(item.product_id, item.quantity)

        cancelled = self.orders.update_status(order_id, OrderStatus.CANCELLED, now)
        logger.info(
            f"Order {order_id} cancelled by user {user.id} "
            f"{order.minutes_since_created(now):.1f} minutes after placement"
        )
        return cancelled

    def review_order(self, user: User, order_id: int, review_data: ReviewCreate) -> Tuple[Order, Review]:
        """Customer reviews a delivered order once; updates the store rating"""
        order = self._load(order_id)
        if order.user_id != user.id:
            raise PermissionDeniedError("You can only review your own orders")
        if order.status != OrderStatus.DELIVERED:
            raise InvalidRequestError("Only delivered orders can be reviewed")
        if order.reviewed:
            raise ConflictError("Order has already been reviewed")

        review = self.orders.create_review(order, review_data.rating, review_data.comment, self.clock())
        self.stores.refresh_rating(order.store_id)
        reviewed = self.orders.mark_reviewed(order_id)

        logger.info(f"Order {order_id} reviewed with rating {review_data.rating}")
        return reviewed, review

    def tracking(self, user: User, order_id: int) -> OrderTracking:
        return self.get_order(user, order_id).tracking(self.clock())
