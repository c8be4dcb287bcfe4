"""
Domain Layer - Business Entities

Pydantic models for the marketplace entities plus the order lifecycle and
cart rules that operate on them.
"""
from grocer.domain.user import User
from grocer.domain.store import Store
from grocer.domain.category import Category
from grocer.domain.product import Product
from grocer.domain.order import Order, OrderItem, OrderStatus, Review
from grocer.domain.cart import Cart, CartItem

__all__ = [
    'User', 'Store', 'Category', 'Product',
    'Order', 'OrderItem', 'OrderStatus', 'Review',
    'Cart', 'CartItem',
]
