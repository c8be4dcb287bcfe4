"""
Vendor Stats Service
Dashboard numbers for a vendor's stores

Revenue only counts delivered orders. Growth compares the last 30 days with
the 30 days before them.
"""
import logging
from datetime import timedelta
from decimal import Decimal
from typing import List, Optional

from grocer.domain.order import Order, OrderStatus, to_money
from grocer.domain.user import User
from grocer.services.order_service import OrderService

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 10
GROWTH_PERIOD = timedelta(days=30)


def delivered_revenue(orders: List[Order]) -> Decimal:
    return to_money(sum(
        (o.total_amount for o in orders if o.status == OrderStatus.DELIVERED),
        Decimal("0"),
    ))


def growth_rate(current, previous) -> float:
    """Percent change from previous to current; 0 when previous is 0"""
    if not previous:
        return 0.0
    return round(float((Decimal(current) - Decimal(previous)) / Decimal(previous) * 100), 1)


class StatsService:
    """Aggregates orders and products over the stores a vendor may see"""

    def __init__(self, order_service: OrderService):
        self.order_service = order_service

    def vendor_stats(self, user: User, store_id: Optional[int] = None) -> dict:
        """
        Summary for one store, or for all of the vendor's stores

        Raises:
            NotFoundError: unknown store
            PermissionDeniedError: caller is not the store's vendor
        """
        orders = self.order_service.list_orders(user, store_id=store_id, vendor=store_id is None)
        if store_id is not None:
            store_ids = [store_id]
        else:
            store_ids = self.order_service.stores.find_ids_by_vendor(user.id)
        products = self.order_service.products.find_all(store_ids=store_ids)

        now = self.order_service.clock()
        current = [o for o in orders if now - o.created_at <= GROWTH_PERIOD]
        previous = [o for o in orders if GROWTH_PERIOD < now - o.created_at <= 2 * GROWTH_PERIOD]

        order_total = sum((o.total_amount for o in orders), Decimal("0"))
        average = to_money(order_total / len(orders)) if orders else Decimal("0")
        current_revenue = delivered_revenue(current)
        previous_revenue = delivered_revenue(previous)

        logger.info(f"Stats for vendor {user.id} over stores {store_ids}: {len(orders)} orders")
        return {
            "store_id": store_id,
            "summary": {
                "total_revenue": float(delivered_revenue(orders)),
                "total_orders": len(orders),
                "average_order_value": float(average),
                "revenue_last_30_days": float(current_revenue),
                "orders_last_30_days": len(current),
                "revenue_growth": growth_rate(current_revenue, previous_revenue),
                "order_growth": growth_rate(len(current), len(previous)),
            },
            "orders_by_status": {
                s.value: sum(1 for o in orders if o.status == s) for s in OrderStatus
            },
            "products": {
                "total": len(products),
                "active": sum(1 for p in products if p.is_active),
                "low_stock": sum(1 for p in products if p.stock < LOW_STOCK_THRESHOLD),
            },
        }
