"""
Orders API Endpoints
Order placement, listing and the order lifecycle

Customers place, cancel, review and track their orders; vendors list the
orders of their stores and move them forward.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from grocer.api.deps import get_order_service, get_stats_service
from grocer.core.auth import get_current_user
from grocer.domain.order import OrderCreate, OrderStatus, OrderStatusUpdate, ReviewCreate
from grocer.domain.user import User
from grocer.services.order_service import OrderService
from grocer.services.stats_service import StatsService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def get_orders(
    store_id: Optional[int] = Query(None, description="Orders of one of your stores"),
    vendor: bool = Query(False, description="Orders across all of your stores"),
    order_status: Optional[OrderStatus] = Query(None, alias="status", description="Filter by status"),
    user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """
    Get orders visible to the caller, newest first

    Without filters this returns the orders the caller placed.
    """
    orders = service.list_orders(user, store_id=store_id, vendor=vendor, status=order_status)
    return {
        "status": "success",
        "count": len(orders),
        "data": [order.to_dict() for order in orders]
    }


@router.get("/stats")
async def get_order_stats(
    store_id: Optional[int] = Query(None, description="Limit to one of your stores"),
    user: User = Depends(get_current_user),
    service: StatsService = Depends(get_stats_service)
):
    """
    Vendor dashboard summary

    Revenue from delivered orders, orders per status, catalog counts and
    growth of the last 30 days against the 30 before.
    """
    stats = service.vendor_stats(user, store_id=store_id)
    return {"status": "success", "data": stats}


@router.get("/{order_id}")
async def get_order(
    order_id: int,
    user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    order = service.get_order(user, order_id)
    return {"status": "success", "data": order.to_dict()}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """
    Place an order

    Prices come from the catalog; any client-supplied total is ignored.
    """
    order = service.place_order(user, order_data)
    return {"status": "success", "data": order.to_dict()}


@router.put("/{order_id}/status")
async def update_order_status(
    order_id: int,
    update: OrderStatusUpdate,
    user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """Vendor status update (forward only)"""
    order = service.update_status(user, order_id, update.status)
    return {"status": "success", "data": order.to_dict()}


@router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: int,
    user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """Cancel a pending order within the cancellation window"""
    order = service.cancel_order(user, order_id)
    return {
        "status": "success",
        "message": "Order cancelled successfully",
        "data": order.to_dict()
    }


@router.post("/{order_id}/review", status_code=status.HTTP_201_CREATED)
async def review_order(
    order_id: int,
    review_data: ReviewCreate,
    user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    order, review = service.review_order(user, order_id, review_data)
    return {
        "status": "success",
        "data": {
            "order": order.to_dict(),
            "review": review.to_dict()
        }
    }


@router.get("/{order_id}/tracking")
async def get_order_tracking(
    order_id: int,
    user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    tracking = service.tracking(user, order_id)
    return {"status": "success", "data": tracking.to_dict()}
