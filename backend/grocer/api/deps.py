"""API dependencies - settings, clock and services bound to the running app"""
from datetime import datetime
from typing import Callable

from fastapi import Depends, Request

from grocer.core.config import Settings
from grocer.core.database import InMemoryDatabase, get_db
from grocer.services.cart_service import CartService
from grocer.services.order_service import OrderService
from grocer.services.stats_service import StatsService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_clock(request: Request) -> Callable[[], datetime]:
    """Clock used for order timestamps; tests swap app.state.clock"""
    return request.app.state.clock


def get_order_service(
    request: Request,
    db: InMemoryDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings),
    clock: Callable[[], datetime] = Depends(get_clock)
) -> OrderService:
    return OrderService(db, settings, clock=clock, rng=request.app.state.rng)


def get_cart_service(order_service: OrderService = Depends(get_order_service)) -> CartService:
    return CartService(order_service)


def get_stats_service(order_service: OrderService = Depends(get_order_service)) -> StatsService:
    return StatsService(order_service)
