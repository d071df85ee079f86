"""Integration tests for cart, notifications and store overview endpoints."""

BUYER = {"X-User-Id": "buyer-1", "X-User-Role": "buyer"}
OWNER_A = {"X-User-Id": "owner-1", "X-User-Role": "store"}
ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}


class TestCartAPI:
    def test_empty_cart(self, client, world):
        data = client.get("/cart", headers=BUYER).json()["data"]
        assert data == {"buyerId": "buyer-1", "items": [], "updatedAt": None}

    def test_add_update_clear(self, client, world):
        product_id = str(world.shirt.id)
        response = client.post("/cart", json={"productId": product_id, "quantity": 2}, headers=BUYER)
        assert response.status_code == 201
        assert response.json()["data"]["items"][0]["quantity"] == 2

        response = client.patch("/cart/update-quantity", json={"productId": product_id, "quantity": 5}, headers=BUYER)
        assert response.json()["data"]["items"][0]["quantity"] == 5

        response = client.delete("/cart/clear", headers=BUYER)
        assert response.json()["data"]["items"] == []


class TestNotificationsAPI:
    def test_list_and_mark_read(self, client, place_order):
        place_order()
        page = client.get("/notifications", headers=OWNER_A).json()["data"]
        [notification] = page["items"]
        assert notification["notificationType"] == "new_order"

        response = client.patch(f"/notifications/{notification['id']}/read", headers=OWNER_A)
        assert response.json()["data"]["isRead"] is True
        assert client.get("/notifications", params={"unreadOnly": True}, headers=OWNER_A).json()["data"]["total"] == 0


class TestOverviewAPI:
    def test_store_owner_overview(self, client, world, place_order):
        place_order()
        data = client.get("/store-orders/overview", headers=OWNER_A).json()["data"]
        assert data["counts"]["pending"] == 1
        assert data["total"] == 1
        assert data["storeIds"] == [str(world.store_a.id)]

    def test_staff_without_store_gets_platform_overview(self, client, place_order):
        place_order()
        data = client.get("/store-orders/overview", headers=ADMIN).json()["data"]
        assert data["counts"]["pending"] == 1
        assert data["storeIds"] == []
