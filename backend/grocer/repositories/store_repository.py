"""
Store Repository - Data Access Layer for Stores

Deleting a store cascades to its products, orders, order items and reviews.
"""
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from grocer.domain.store import Store, StoreCreate, StoreUpdate
from grocer.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class StoreRepository(BaseRepository[Store]):
    """Repository for Store data access"""

    table_name = "stores"
    model = Store

    def find_all(
        self,
        search: Optional[str] = None,
        vendor_id: Optional[int] = None
    ) -> List[Store]:
        """
        Find stores with filters

        Args:
            search: Case-insensitive match on name or description
            vendor_id: Only stores owned by this vendor

        Returns:
            Stores ordered by id
        """
        stores = self._all()
        if vendor_id is not None:
            stores = [s for s in stores if s.vendor_id == vendor_id]
        if search:
            stores = [s for s in stores if s.matches(search)]
        return stores

    def find_ids_by_vendor(self, vendor_id: int) -> List[int]:
        return sorted(s.id for s in self.rows.values() if s.vendor_id == vendor_id)

    def create(self, vendor_id: int, store_data: StoreCreate) -> Store:
        return self._insert(vendor_id=vendor_id, rating=0, review_count=0, **store_data.model_dump())

    def update(self, store_id: int, store_data: StoreUpdate) -> Optional[Store]:
        return self._update(store_id, store_data.model_dump(exclude_unset=True))

    def refresh_rating(self, store_id: int) -> Optional[Store]:
        """Set the store rating to the mean of all its review ratings, to 1 decimal"""
        if store_id not in self.rows:
            return None
        ratings = [r.rating for r in self.db.table("reviews").values() if r.store_id == store_id]
        mean = Decimal(sum(ratings)) / len(ratings) if ratings else Decimal("0")
        rating = float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
        return self._update(store_id, {"rating": rating, "review_count": len(ratings)})

    def delete(self, store_id: int) -> bool:
        """
        Delete a store and everything that belongs to it

        Returns:
            False if the store doesn't exist
        """
        if store_id not in self.rows:
            return False

        products = self.db.table("products")
        product_ids = [pid for pid, p in products.items() if p.store_id == store_id]
        for product_id in product_ids:
            del products[product_id]

        orders = self.db.table("orders")
        order_items = self.db.table("order_items")
        order_ids = {oid for oid, o in orders.items() if o.store_id == store_id}
        item_ids = [iid for iid, item in order_items.items() if item.order_id in order_ids]
        for item_id in item_ids:
            del order_items[item_id]
        for order_id in order_ids:
            del orders[order_id]

        reviews = self.db.table("reviews")
        for review_id in [rid for rid, r in reviews.items() if r.store_id == store_id]:
            del reviews[review_id]

        del self.rows[store_id]

        logger.info(
            f"Deleted store {store_id} with {len(product_ids)} products, "
            f"{len(order_ids)} orders and {len(item_ids)} order items"
        )
        return True
