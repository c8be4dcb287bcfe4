"""
Repository Layer - Data Access

Repositories read and write the in-memory tables and return domain models.
"""
from grocer.repositories.user_repository import UserRepository
from grocer.repositories.store_repository import StoreRepository
from grocer.repositories.category_repository import CategoryRepository
from grocer.repositories.product_repository import ProductRepository
from grocer.repositories.order_repository import OrderRepository

__all__ = [
    'UserRepository',
    'StoreRepository',
    'CategoryRepository',
    'ProductRepository',
    'OrderRepository'
]
