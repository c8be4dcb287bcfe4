"""
API tests for order placement and the order lifecycle

The app clock is a FakeClock (see conftest) so the cancellation window and
tracking timeline can be driven from the tests.
"""
from datetime import datetime, timedelta

import pytest


@pytest.fixture
def placed_order(client, customer_headers, sample_order_data):
    response = client.post("/api/orders", headers=customer_headers, json=sample_order_data)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestPlaceOrderAPI:

    def test_place_order(self, client, placed_order, clock):
        assert placed_order["status"] == "pending"
        assert placed_order["subtotal"] == 310.0
        assert placed_order["delivery_fee"] == 30.0
        assert placed_order["total_amount"] == 340.0
        assert placed_order["item_count"] == 3
        assert [item["product_name"] for item in placed_order["items"]] == ["Amul Butter", "Amul Paneer"]

        estimated = datetime.fromisoformat(placed_order["estimated_delivery"])
        assert clock.now + timedelta(minutes=30) <= estimated <= clock.now + timedelta(minutes=45)

    def test_client_total_ignored(self, client, customer_headers, sample_order_data):
        response = client.post("/api/orders", headers=customer_headers, json={**sample_order_data, "total_amount": 1})

        assert response.json()["data"]["total_amount"] == 340.0

    def test_stock_decremented(self, client, placed_order):
        assert client.get("/api/products/1").json()["data"]["stock"] == 48

    def test_requires_auth(self, client, sample_order_data):
        assert client.post("/api/orders", json=sample_order_data).status_code == 401

    @pytest.mark.parametrize("payload,status_code", [
        ({"store_id": 1, "items": []}, 400),
        ({"store_id": 1, "items": [{"product_id": 1, "quantity": 0}]}, 400),
        ({"store_id": 99, "items": [{"product_id": 1, "quantity": 1}]}, 404),
        ({"store_id": 1, "items": [{"product_id": 999, "quantity": 1}]}, 400),
        ({"store_id": 1, "items": [{"product_id": 1, "quantity": 51}]}, 400),
    ])
    def test_rejected_orders(self, client, customer_headers, payload, status_code):
        response = client.post("/api/orders", headers=customer_headers, json=payload)

        assert response.status_code == status_code
        assert response.json()["status"] == "error"

    def test_list_and_get(self, client, customer_headers, placed_order):
        listing = client.get("/api/orders", headers=customer_headers).json()
        assert listing["count"] == 1

        detail = client.get(f"/api/orders/{placed_order['id']}", headers=customer_headers)
        assert detail.status_code == 200
        assert detail.json()["data"]["id"] == placed_order["id"]

    def test_other_customer_cannot_see_order(self, client, register_user, placed_order):
        headers, _ = register_user("eve")

        assert client.get(f"/api/orders/{placed_order['id']}", headers=headers).status_code == 403
        assert client.get("/api/orders", headers=headers).json()["count"] == 0

    def test_vendor_store_orders(self, client, vendor_headers, customer_headers, placed_order):
        assert client.get("/api/orders?store_id=1", headers=vendor_headers).json()["count"] == 1
        assert client.get("/api/orders?vendor=true", headers=vendor_headers).json()["count"] == 1
        assert client.get("/api/orders?vendor=true&status=delivered", headers=vendor_headers).json()["count"] == 0
        assert client.get("/api/orders?store_id=1", headers=customer_headers).status_code == 403

    def test_invalid_status_filter(self, client, customer_headers):
        assert client.get("/api/orders?status=lost", headers=customer_headers).status_code == 400


class TestCancellationAPI:

    def test_cancel_at_nine_fifty_nine(self, client, customer_headers, placed_order, clock):
        clock.advance(minutes=9, seconds=59)

        response = client.post(f"/api/orders/{placed_order['id']}/cancel", headers=customer_headers)

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "cancelled"
        assert client.get("/api/products/1").json()["data"]["stock"] == 50

    def test_cancel_at_exactly_ten_minutes(self, client, customer_headers, placed_order, clock):
        clock.advance(minutes=10)

        response = client.post(f"/api/orders/{placed_order['id']}/cancel", headers=customer_headers)

        assert response.status_code == 200

    def test_cancel_at_ten_oh_one_rejected(self, client, customer_headers, placed_order, clock):
        clock.advance(minutes=10, seconds=1)

        response = client.post(f"/api/orders/{placed_order['id']}/cancel", headers=customer_headers)

        assert response.status_code == 400
        assert response.json() == {
            "status": "error",
            "message": "Order cannot be cancelled after 10 minutes of placement",
            "time_elapsed": 10,
        }
        order = client.get(f"/api/orders/{placed_order['id']}", headers=customer_headers).json()["data"]
        assert order["status"] == "pending"

    def test_cancel_twice(self, client, customer_headers, placed_order):
        client.post(f"/api/orders/{placed_order['id']}/cancel", headers=customer_headers)

        response = client.post(f"/api/orders/{placed_order['id']}/cancel", headers=customer_headers)

        assert response.status_code == 400
        assert "time_elapsed" not in response.json()

    def test_vendor_cannot_cancel(self, client, vendor_headers, placed_order):
        assert client.post(f"/api/orders/{placed_order['id']}/cancel", headers=vendor_headers).status_code == 403

    def test_cancel_missing_order(self, client, customer_headers):
        assert client.post("/api/orders/999/cancel", headers=customer_headers).status_code == 404


class TestStatusAPI:

    def test_forward_progression(self, client, vendor_headers, placed_order):
        url = f"/api/orders/{placed_order['id']}/status"

        for status in ["processing", "out_for_delivery", "delivered"]:
            response = client.put(url, headers=vendor_headers, json={"status": status})
            assert response.status_code == 200
            assert response.json()["data"]["status"] == status
            assert response.json()["data"]["updated_at"] is not None

    @pytest.mark.parametrize("status", ["pending", "cancelled", "shipped"])
    def test_rejected_updates(self, client, vendor_headers, placed_order, status):
        response = client.put(
            f"/api/orders/{placed_order['id']}/status", headers=vendor_headers, json={"status": status}
        )

        assert response.status_code == 400

    def test_customer_cannot_update(self, client, customer_headers, placed_order):
        response = client.put(
            f"/api/orders/{placed_order['id']}/status", headers=customer_headers, json={"status": "processing"}
        )

        assert response.status_code == 403

    def test_delivered_is_final(self, client, vendor_headers, placed_order):
        url = f"/api/orders/{placed_order['id']}/status"
        client.put(url, headers=vendor_headers, json={"status": "delivered"})

        response = client.put(url, headers=vendor_headers, json={"status": "delivered"})

        assert response.status_code == 400
        assert "already delivered" in response.json()["message"]


class TestReviewAndTrackingAPI:

    def test_review_flow(self, client, customer_headers, vendor_headers, placed_order):
        url = f"/api/orders/{placed_order['id']}/review"
        review = {"rating": 5, "comment": "Great service"}

        assert client.post(url, headers=customer_headers, json=review).status_code == 400

        client.put(f"/api/orders/{placed_order['id']}/status", headers=vendor_headers, json={"status": "delivered"})
        response = client.post(url, headers=customer_headers, json=review)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["order"]["reviewed"] is True
        assert data["review"]["rating"] == 5

        store = client.get("/api/stores/1").json()["data"]
        assert store["rating"] == 5.0
        assert store["review_count"] == 1

        reviews = client.get("/api/stores/1/reviews").json()
        assert reviews["count"] == 1
        assert reviews["data"][0]["comment"] == "Great service"

        assert client.post(url, headers=customer_headers, json=review).status_code == 409

    @pytest.mark.parametrize("review", [
        {"rating": 0, "comment": "Bad"},
        {"rating": 6, "comment": "Good"},
        {"rating": 4, "comment": "   "},
    ])
    def test_invalid_review(self, client, customer_headers, placed_order, review):
        response = client.post(f"/api/orders/{placed_order['id']}/review", headers=customer_headers, json=review)

        assert response.status_code == 400

    def test_tracking_timeline(self, client, customer_headers, placed_order, clock):
        url = f"/api/orders/{placed_order['id']}/tracking"

        first = client.get(url, headers=customer_headers).json()["data"]
        assert first["current_step"] == 0
        assert len(first["steps"]) == 4

        clock.advance(minutes=16)
        later = client.get(url, headers=customer_headers).json()["data"]
        assert later["current_step"] == 2
        assert later["is_delayed"] is False

        clock.advance(hours=1)
        assert client.get(url, headers=customer_headers).json()["data"]["is_delayed"] is True

    def test_tracking_cancelled(self, client, customer_headers, placed_order):
        client.post(f"/api/orders/{placed_order['id']}/cancel", headers=customer_headers)

        data = client.get(f"/api/orders/{placed_order['id']}/tracking", headers=customer_headers).json()["data"]

        assert data["is_cancelled"] is True
        assert data["current_step"] == 0


class TestOrderStatsAPI:

    def test_vendor_dashboard(self, client, vendor_headers, customer_headers, placed_order):
        client.put(f"/api/orders/{placed_order['id']}/status", headers=vendor_headers, json={"status": "delivered"})
        client.post("/api/orders", headers=customer_headers, json={
            "store_id": 3, "items": [{"product_id": 17, "quantity": 4}],
        })

        response = client.get("/api/orders/stats", headers=vendor_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["store_id"] is None
        assert data["summary"]["total_orders"] == 2
        assert data["summary"]["total_revenue"] == 340.0
        assert data["orders_by_status"]["delivered"] == 1
        assert data["orders_by_status"]["pending"] == 1

    def test_single_store(self, client, vendor_headers, placed_order):
        data = client.get("/api/orders/stats?store_id=3", headers=vendor_headers).json()["data"]

        assert data["summary"]["total_orders"] == 0
        assert data["products"]["total"] == 5

    def test_customer_forbidden(self, client, customer_headers):
        assert client.get("/api/orders/stats", headers=customer_headers).status_code == 403
        assert client.get("/api/orders/stats?store_id=1", headers=customer_headers).status_code == 403

    def test_requires_auth(self, client):
        assert client.get("/api/orders/stats").status_code == 401

    def test_unknown_store(self, client, vendor_headers):
        assert client.get("/api/orders/stats?store_id=99", headers=vendor_headers).status_code == 404
