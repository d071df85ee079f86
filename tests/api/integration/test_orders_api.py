"""Integration tests for the order endpoints via TestClient."""


def as_user(user_id, role):
    return {"X-User-Id": user_id, "X-User-Role": role}


BUYER = as_user("buyer-1", "buyer")
OTHER_BUYER = as_user("buyer-2", "buyer")
OWNER_A = as_user("owner-1", "store")
ADMIN = as_user("admin-1", "admin")


def _create(client, world, items=None, headers=BUYER):
    body = {
        "orderData": {"destinationAddressId": str(world.home.id), "paymentMethod": "orange_money"},
        "items": items or [{"productId": str(world.shirt.id), "quantity": 2}],
    }
    return client.post("/orders", json=body, headers=headers)


class TestCreateOrderAPI:
    def test_create_returns_order_with_store_orders_and_payment(self, client, world):
        response = _create(client, world)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["status"] == "pending"
        assert data["itemsTotal"] == 100000
        assert data["totalDeliveryFee"] == 8000
        assert data["platformFee"] == 5000
        assert data["grandTotal"] == 113000
        assert len(data["storeOrderIds"]) == 1
        assert data["storeOrders"][0]["storeId"] == str(world.store_a.id)
        assert data["storeOrders"][0]["items"][0]["unitPrice"] == 50000
        assert data["payment"]["status"] == "pending"

    def test_missing_headers(self, client, world):
        response = client.get("/orders")
        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": {"code": "AUTHORIZATION_ERROR", "message": "Authentication required"},
        }

    def test_unknown_role(self, client, world):
        response = _create(client, world, headers=as_user("u-1", "superuser"))
        assert response.status_code == 401

    def test_driver_is_forbidden(self, client, world):
        response = _create(client, world, headers=as_user("driver-user-1", "driver"))
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "AUTHORIZATION_ERROR"

    def test_invalid_body(self, client, world):
        response = _create(client, world, items=[{"productId": str(world.shirt.id), "quantity": 0}])
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"]["errors"][0]["field"] == "items.0.quantity"

    def test_insufficient_stock(self, client, world):
        response = _create(client, world, items=[{"productId": str(world.rice.id), "quantity": 50}])
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INSUFFICIENT_STOCK"

    def test_unknown_product(self, client, world):
        response = _create(client, world, items=[{"productId": "nope", "quantity": 1}])
        assert response.json()["error"]["code"] == "PRODUCT_NOT_FOUND"


class TestReadOrdersAPI:
    def test_read_own_order(self, client, world):
        order_id = _create(client, world).json()["data"]["id"]
        response = client.get(f"/orders/{order_id}", headers=BUYER)
        assert response.status_code == 200
        assert response.json()["data"]["id"] == order_id

    def test_detail_includes_timeline(self, client, world):
        order_id = _create(client, world).json()["data"]["id"]
        client.patch(f"/orders/{order_id}/status", json={"status": "in_progress"}, headers=ADMIN)

        timeline = client.get(f"/orders/{order_id}", headers=BUYER).json()["data"]["timeline"]
        assert [entry["eventType"] for entry in timeline] == ["OrderPlaced", "OrderStatusChanged"]
        assert timeline[1]["description"] == "Order moved from pending to in_progress"
        assert "occurredAt" in timeline[0]

    def test_other_buyer_is_forbidden(self, client, world):
        order_id = _create(client, world).json()["data"]["id"]
        assert client.get(f"/orders/{order_id}", headers=OTHER_BUYER).status_code == 403

    def test_unknown_order(self, client, world):
        response = client.get("/orders/no-such-order", headers=BUYER)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_search_is_paginated(self, client, world):
        for _ in range(3):
            _create(client, world, items=[{"productId": str(world.shirt.id), "quantity": 1}])

        response = client.get("/orders", params={"perPage": 2, "status": "pending"}, headers=BUYER)
        data = response.json()["data"]
        assert (data["total"], data["pages"], data["perPage"]) == (3, 2, 2)
        assert len(data["items"]) == 2
        assert "grandTotal" in data["items"][0]

    def test_search_with_bad_status(self, client, world):
        response = client.get("/orders", params={"status": "shipped"}, headers=BUYER)
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_snake_case_filters(self, client, world):
        _create(client, world)
        _create(client, world, items=[{"productId": str(world.shirt.id), "quantity": 1}])

        unpaid = client.get("/orders", params={"payment_status": "paid"}, headers=BUYER).json()["data"]
        assert unpaid["total"] == 0

        cheap = client.get("/orders", params={"max_amount": 100000, "per_page": 1}, headers=BUYER).json()["data"]
        assert (cheap["total"], cheap["perPage"]) == (1, 1)

        recent = client.get("/orders", params={"date_start": "2000-01-01T00:00:00"}, headers=BUYER).json()["data"]
        assert recent["total"] == 2

    def test_malformed_query(self, client, world):
        response = client.get("/orders", params={"per_page": "many"}, headers=BUYER)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_flat_body_is_rejected(self, client, world):
        body = {"destinationAddressId": str(world.home.id), "items": [{"productId": str(world.shirt.id), "quantity": 1}]}
        response = client.post("/orders", json=body, headers=BUYER)
        assert response.status_code == 400
        assert response.json()["error"]["details"]["errors"][0]["field"] == "orderData"


class TestOrderCommandsAPI:
    def test_cancel(self, client, world):
        order_id = _create(client, world).json()["data"]["id"]
        response = client.delete(f"/orders/{order_id}", params={"reason": "Erreur"}, headers=BUYER)

        data = response.json()["data"]
        assert data["status"] == "cancelled"
        assert data["cancellationReason"] == "Erreur"
        assert data["payment"]["status"] == "failed"

    def test_status_update(self, client, world):
        order_id = _create(client, world).json()["data"]["id"]
        response = client.patch(f"/orders/{order_id}/status", json={"status": "in_progress"}, headers=ADMIN)
        assert response.json()["data"]["status"] == "in_progress"

    def test_illegal_transition(self, client, world):
        order_id = _create(client, world).json()["data"]["id"]
        response = client.patch(f"/orders/{order_id}/status", json={"status": "delivered"}, headers=ADMIN)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "ILLEGAL_STATE_TRANSITION"

    def test_paid_without_transaction_id(self, client, world):
        order_id = _create(client, world).json()["data"]["id"]
        response = client.patch(f"/orders/{order_id}/payment", json={"status": "paid"}, headers=ADMIN)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_paid(self, client, world):
        order_id = _create(client, world).json()["data"]["id"]
        response = client.patch(
            f"/orders/{order_id}/payment", json={"status": "paid", "transactionId": "OM-55"}, headers=ADMIN
        )
        data = response.json()["data"]
        assert data["paymentStatus"] == "paid"
        assert data["payment"]["transactionId"] == "OM-55"

    def test_store_order_status(self, client, world):
        data = _create(client, world).json()["data"]
        store_order_id = data["storeOrderIds"][0]
        response = client.patch(
            f"/store-orders/{store_order_id}/status", json={"status": "in_progress"}, headers=OWNER_A
        )
        assert response.json()["data"]["status"] == "in_progress"
        assert client.get(f"/orders/{data['id']}", headers=BUYER).json()["data"]["status"] == "in_progress"
