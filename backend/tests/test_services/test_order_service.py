"""
Unit tests for OrderService

Uses the seeded in-memory database, a fake clock and a seeded random source.
"""
import random
from datetime import timedelta
from decimal import Decimal

import pytest

from grocer.core.exceptions import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    OrderNotCancellableError,
    PermissionDeniedError,
)
from grocer.domain.order import OrderCreate, OrderStatus, ReviewCreate
from grocer.domain.user import UserCreate
from grocer.repositories.product_repository import ProductRepository
from grocer.repositories.store_repository import StoreRepository
from grocer.repositories.user_repository import UserRepository
from grocer.services.order_service import OrderService


@pytest.fixture
def service(seeded_db, test_settings, clock):
    return OrderService(seeded_db, test_settings, clock=clock, rng=random.Random(5))


@pytest.fixture
def customer(seeded_db):
    return UserRepository(seeded_db).create(
        UserCreate(username="alice", password="pw", name="Alice", email="alice@mail.com", address="42 Customer Street"),
        "hash",
    )


@pytest.fixture
def vendor(seeded_db):
    return UserRepository(seeded_db).find_by_username("vendor")


def order_request(**overrides):
    data = {"store_id": 1, "items": [{"product_id": 1, "quantity": 2}, {"product_id": 2, "quantity": 1}]}
    data.update(overrides)
    return OrderCreate(**data)


class TestPlaceOrder:

    def test_prices_from_catalog(self, service, customer, clock):
        order = service.place_order(customer, order_request(total_amount=1))

        assert order.subtotal == Decimal("310.00")
        assert order.delivery_fee == Decimal("30.00")
        assert order.total_amount == Decimal("340.00")
        assert order.created_at == clock.now
        assert order.delivery_address == "42 Customer Street"
        assert clock.now + timedelta(minutes=30) <= order.estimated_delivery <= clock.now + timedelta(minutes=45)

    def test_stock_is_reserved(self, service, customer, seeded_db):
        service.place_order(customer, order_request())

        products = ProductRepository(seeded_db)
        assert products.find_by_id(1).stock == 48
        assert products.find_by_id(2).stock == 29

    def test_duplicate_lines_merge(self, service, customer):
        order = service.place_order(customer, order_request(items=[
            {"product_id": 1, "quantity": 1},
            {"product_id": 1, "quantity": 1},
        ]))

        assert len(order.items) == 1
        assert order.items[0].quantity == 2

    def test_unknown_store(self, service, customer):
        with pytest.raises(NotFoundError):
            service.place_order(customer, order_request(store_id=99))

    def test_product_from_other_store(self, service, customer):
        # product 9 belongs to Super Bazaar
        with pytest.raises(InvalidRequestError, match="not sold by"):
            service.place_order(customer, order_request(items=[{"product_id": 9, "quantity": 2}]))

    def test_insufficient_stock_leaves_stock_untouched(self, service, customer, seeded_db):
        with pytest.raises(InvalidRequestError, match="in stock"):
            service.place_order(customer, order_request(items=[
                {"product_id": 1, "quantity": 2},
                {"product_id": 2, "quantity": 31},
            ]))

        assert ProductRepository(seeded_db).find_by_id(1).stock == 50

    def test_minimum_order(self, service, customer):
        # More SuperMarket minimum is 100; bananas are 60
        with pytest.raises(InvalidRequestError, match="Minimum order") as exc_info:
            service.place_order(customer, order_request(items=[{"product_id": 7, "quantity": 1}]))

        assert exc_info.value.extra["min_order"] == 100.0

    def test_address_required(self, service, seeded_db):
        user = UserRepository(seeded_db).create(
            UserCreate(username="noaddr", password="pw", name="No Address", email="noaddr@mail.com"),
            "hash",
        )
        with pytest.raises(InvalidRequestError, match="address"):
            service.place_order(user, order_request())


class TestOrderLifecycle:

    def test_cancel_within_window_restores_stock(self, service, customer, clock, seeded_db):
        order = service.place_order(customer, order_request())
        clock.advance(minutes=9, seconds=59)

        cancelled = service.cancel_order(customer, order.id)

        assert cancelled.status == OrderStatus.CANCELLED
        assert ProductRepository(seeded_db).find_by_id(1).stock == 50

    def test_cancel_after_window(self, service, customer, clock):
        order = service.place_order(customer, order_request())
        clock.advance(minutes=10, seconds=1)

        with pytest.raises(OrderNotCancellableError) as exc_info:
            service.cancel_order(customer, order.id)

        assert exc_info.value.time_elapsed == 10

    def test_only_owner_cancels(self, service, customer, vendor):
        order = service.place_order(customer, order_request())

        with pytest.raises(PermissionDeniedError):
            service.cancel_order(vendor, order.id)

    def test_vendor_moves_status_forward(self, service, customer, vendor):
        order = service.place_order(customer, order_request())

        assert service.update_status(vendor, order.id, OrderStatus.PROCESSING).status == OrderStatus.PROCESSING
        with pytest.raises(InvalidRequestError):
            service.update_status(vendor, order.id, OrderStatus.PENDING)

    def test_customer_cannot_update_status(self, service, customer):
        order = service.place_order(customer, order_request())

        with pytest.raises(PermissionDeniedError):
            service.update_status(customer, order.id, OrderStatus.PROCESSING)

    def test_cannot_cancel_processing_order(self, service, customer, vendor):
        order = service.place_order(customer, order_request())
        service.update_status(vendor, order.id, OrderStatus.PROCESSING)

        with pytest.raises(OrderNotCancellableError):
            service.cancel_order(customer, order.id)

    def test_review_delivered_order_once(self, service, customer, vendor, seeded_db):
        order = service.place_order(customer, order_request())
        review = ReviewCreate(rating=4, comment="  Fresh and on time ")

        with pytest.raises(InvalidRequestError, match="delivered"):
            service.review_order(customer, order.id, review)

        service.update_status(vendor, order.id, OrderStatus.DELIVERED)
        reviewed, saved = service.review_order(customer, order.id, review)

        assert reviewed.reviewed
        assert saved.comment == "Fresh and on time"
        store = StoreRepository(seeded_db).find_by_id(1)
        assert store.rating == 4.0
        assert store.review_count == 1

        with pytest.raises(ConflictError):
            service.review_order(customer, order.id, review)

    def test_visibility(self, service, customer, vendor, seeded_db):
        order = service.place_order(customer, order_request())
        stranger = UserRepository(seeded_db).create(
            UserCreate(username="eve", password="pw", name="Eve", email="eve@mail.com"), "hash"
        )

        assert service.get_order(customer, order.id).id == order.id
        assert service.get_order(vendor, order.id).id == order.id
        with pytest.raises(PermissionDeniedError):
            service.get_order(stranger, order.id)
        with pytest.raises(NotFoundError):
            service.get_order(customer, 999)

    def test_list_orders_scopes(self, service, customer, vendor):
        order = service.place_order(customer, order_request())

        assert [o.id for o in service.list_orders(customer)] == [order.id]
        assert service.list_orders(vendor) == []
        assert [o.id for o in service.list_orders(vendor, vendor=True)] == [order.id]
        assert [o.id for o in service.list_orders(vendor, store_id=1)] == [order.id]
        assert service.list_orders(vendor, store_id=1, status=OrderStatus.DELIVERED) == []

        with pytest.raises(PermissionDeniedError):
            service.list_orders(customer, store_id=1)
        with pytest.raises(PermissionDeniedError):
            service.list_orders(customer, vendor=True)

    def test_tracking_uses_clock(self, service, customer, clock):
        order = service.place_order(customer, order_request())
        clock.advance(minutes=6)

        tracking = service.tracking(customer, order.id)

        assert tracking.current_step == 1
        assert tracking.order_id == order.id
