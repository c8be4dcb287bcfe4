"""
Product Repository - Data Access Layer for Products

Handles all catalog queries and returns Product domain models.
"""
from typing import Iterable, List, Optional

from grocer.core.exceptions import InvalidRequestError
from grocer.domain.product import Product, ProductCreate, ProductUpdate
from grocer.repositories.base_repository import BaseRepository


class ProductRepository(BaseRepository[Product]):
    """
    Repository for Product data access

    Filters combine with AND; results are ordered by id.
    """

    table_name = "products"
    model = Product

    def find_all(
        self,
        store_id: Optional[int] = None,
        store_ids: Optional[Iterable[int]] = None,
        category_id: Optional[int] = None,
        search: Optional[str] = None,
        is_active: Optional[bool] = None
    ) -> List[Product]:
        """
        Find products with filters

        Args:
            store_id: Filter by store
            store_ids: Filter by any of these stores (vendor catalog)
            category_id: Filter by category
            search: Case-insensitive match on name or description
            is_active: Filter by active status

        Returns:
            List of products
        """
        products = self._all()

        if store_id is not None:
            products = [p for p in products if p.store_id == store_id]

        if store_ids is not None:
            allowed = set(store_ids)
            products = [p for p in products if p.store_id in allowed]

        if category_id is not None:
            products = [p for p in products if p.category_id == category_id]

        if is_active is not None:
            products = [p for p in products if p.is_active == is_active]

        if search:
            products = [p for p in products if p.matches(search)]

        return products

    def create(self, product_data: ProductCreate) -> Product:
        return self._insert(**product_data.model_dump())

    def update(self, product_id: int, product_data: ProductUpdate) -> Optional[Product]:
        return self._update(product_id, product_data.model_dump(exclude_unset=True))

    def delete(self, product_id: int) -> bool:
        return self._delete(product_id)

    def adjust_stock(self, product_id: int, delta: int) -> Product:
        """
        Add `delta` units (negative to reserve) to a product's stock

        Raises:
            InvalidRequestError if the product is missing or stock would go negative
        """
        product = self.rows.get(product_id)
        if product is None:
            raise InvalidRequestError(f"Product {product_id} not found")
        new_stock = product.stock + delta
        if new_stock < 0:
            raise InvalidRequestError(
                f"Only {product.stock} {product.unit} of {product.name} in stock"
            )
        return self._update(product_id, {"stock": new_stock})
