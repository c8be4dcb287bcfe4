"""
Cart Service
Per-user carts held in memory and checkout into orders
"""
import logging
from decimal import Decimal
from typing import Optional

from grocer.core.exceptions import InvalidRequestError, NotFoundError
from grocer.domain.cart import Cart, CartItem
from grocer.domain.order import Order, OrderCreate, OrderItemCreate
from grocer.domain.user import User
from grocer.repositories.product_repository import ProductRepository
from grocer.repositories.store_repository import StoreRepository
from grocer.services.order_service import OrderService

logger = logging.getLogger(__name__)


class CartService:
    """
    Cart operations for the authenticated user

    Carts live in `db.carts` keyed by user id and are created on first use.
    """

    def __init__(self, order_service: OrderService):
        self.order_service = order_service
        self.db = order_service.db
        self.products = ProductRepository(self.db)
        self.stores = StoreRepository(self.db)

    def get_cart(self, user: User) -> Cart:
        cart = self.db.carts.get(user.id)
        if cart is None:
            cart = Cart(user_id=user.id)
            self.db.carts[user.id] = cart
        return cart

    def delivery_fee(self, cart: Cart) -> Decimal:
        if cart.store_id is None:
            return Decimal("0")
        store = self.stores.find_by_id(cart.store_id)
        return store.delivery_fee if store else Decimal("0")

    def summary(self, user: User) -> dict:
        """Cart contents with totals using the store's delivery fee"""
        cart = self.get_cart(user)
        return cart.to_dict(self.delivery_fee(cart))

    def add_item(self, user: User, product_id: int, quantity: int = 1, replace_cart: bool = False) -> CartItem:
        product = self.products.find_by_id(product_id)
        if not product:
            raise NotFoundError("Product not found")

        cart = self.get_cart(user)
        if replace_cart and cart.store_id not in (None, product.store_id):
            logger.info(f"Replacing cart of user {user.id} (store {cart.store_id} -> {product.store_id})")
        return cart.add_item(product, quantity, replace_cart=replace_cart)

    def update_item(self, user: User, item_id: int, quantity: int) -> Optional[CartItem]:
        cart = self.get_cart(user)
        item = cart.find_item(item_id)
        product = self.products.find_by_id(item.product_id)
        available = product.stock if product else 0
        return cart.update_quantity(item_id, quantity, available=available)

    def remove_item(self, user: User, item_id: int) -> None:
        self.get_cart(user).remove_item(item_id)

    def clear(self, user: User) -> None:
        self.get_cart(user).clear()

    def discard(self, user_id: int) -> None:
        """Drop a user's cart entirely (logout)"""
        self.db.carts.pop(user_id, None)

    def checkout(self, user: User, delivery_address: Optional[str] = None) -> Order:
        """
        Place an order from the cart and empty it

        Raises:
            InvalidRequestError: empty cart, missing address or any order rule
        """
        cart = self.get_cart(user)
        if cart.is_empty:
            raise InvalidRequestError("Your cart is empty")

        address = (delivery_address or "").strip() or (user.address or "").strip()
        if not address:
            raise InvalidRequestError("Please add a delivery address before checkout")

        order_data = OrderCreate(
            store_id=cart.store_id,
            delivery_address=address,
            items=[OrderItemCreate(product_id=i.product_id, quantity=i.quantity) for i in cart.items],
        )
        order = self.order_service.place_order(user, order_data)
        cart.clear()

        logger.info(f"Checkout by user {user.id} created order {order.id}")
        return order
