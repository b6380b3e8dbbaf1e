"""HTTP tests for the inventory API, run against SQLite through TestClient."""

import pytest

BASE = "/api/inventory"


def _create(client, product_id, quantity):
    resp = client.post(f"{BASE}/", json={"product_id": product_id, "quantity": quantity})
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def seeded(client):
    return [_create(client, 1000 + i, 10 + i) for i in range(8)]


class TestListing:

    def test_default_pagination(self, client):
        resp = client.get(f"{BASE}/")
        assert resp.status_code == 200
        body = resp.json()
        assert body["page"] == 0
        assert body["size"] == 20
        assert body["total"] == 0
        assert body["total_pages"] == 0
        assert body["has_next"] is False
        assert body["has_previous"] is False

    def test_first_page(self, client, seeded):
        body = client.get(f"{BASE}/", params={"page": 0, "size": 3}).json()
        assert len(body["data"]) == 3
        assert body["total_pages"] == 3
        assert body["has_next"] is True
        assert body["has_previous"] is False

    def test_middle_page(self, client, seeded):
        body = client.get(f"{BASE}/", params={"page": 1, "size": 3}).json()
        assert len(body["data"]) == 3
        assert body["has_next"] is True
        assert body["has_previous"] is True

    def test_last_page(self, client, seeded):
        body = client.get(f"{BASE}/", params={"page": 2, "size": 3}).json()
        assert len(body["data"]) == 2
        assert body["has_next"] is False
        assert body["has_previous"] is True

    def test_size_is_capped(self, client):
        body = client.get(f"{BASE}/", params={"size": 200}).json()
        assert body["size"] == 100

    def test_page_past_the_end(self, client, seeded):
        resp = client.get(f"{BASE}/", params={"page": 50, "size": 3})
        assert resp.status_code == 200
        assert resp.json()["data"] == []

    def test_negative_page_rejected(self, client):
        resp = client.get(f"{BASE}/", params={"page": -1})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Validation Failed"

    def test_all_and_count(self, client, seeded):
        assert len(client.get(f"{BASE}/all").json()) == 8
        resp = client.get(f"{BASE}/count")
        assert resp.status_code == 200
        assert resp.text == "8"
        assert resp.headers["content-type"].startswith("text/plain")


class TestLookups:

    def test_get_by_id(self, client, seeded):
        item = seeded[0]
        resp = client.get(f"{BASE}/{item['id']}")
        assert resp.status_code == 200
        assert resp.json() == item

    def test_get_by_product_id(self, client, seeded):
        resp = client.get(f"{BASE}/product/1003")
        assert resp.status_code == 200
        assert resp.json()["quantity"] == 13

    def test_not_found_body(self, client):
        resp = client.get(f"{BASE}/999999")
        assert resp.status_code == 404
        body = resp.json()
        assert body["status"] == 404
        assert body["error"] == "Not Found"
        assert "not found" in body["message"]
        assert body["path"] == f"{BASE}/999999"

    def test_product_not_found(self, client):
        assert client.get(f"{BASE}/product/424242").status_code == 404


class TestCreate:

    def test_create(self, client):
        resp = client.post(f"{BASE}/", json={"product_id": 2001, "quantity": 100})
        assert resp.status_code == 201
        body = resp.json()
        assert body["quantity"] == 100
        assert body["product_id"] == 2001
        assert resp.headers["location"].endswith(f"{BASE}/{body['id']}")

    def test_create_with_zero_quantity(self, client):
        assert _create(client, 2002, 0)["quantity"] == 0

    def test_client_supplied_id_is_ignored(self, client):
        body = client.post(f"{BASE}/", json={"id": 777, "product_id": 2005, "quantity": 1}).json()
        assert body["id"] != 777

    def test_negative_quantity(self, client):
        resp = client.post(f"{BASE}/", json={"product_id": 2003, "quantity": -10})
        assert resp.status_code == 400
        assert "negative" in resp.json()["message"]
        assert client.get(f"{BASE}/count").text == "0"

    def test_missing_product_id(self, client):
        resp = client.post(f"{BASE}/", json={"quantity": 50})
        assert resp.status_code == 400
        assert "product_id" in resp.json()["message"]

    def test_duplicate_product(self, client):
        _create(client, 2001, 1)
        resp = client.post(f"{BASE}/", json={"product_id": 2001, "quantity": 2})
        assert resp.status_code == 409
        assert resp.json()["error"] == "Conflict"

    def test_not_found_then_create_is_visible(self, client):
        assert client.get(f"{BASE}/product/5000").status_code == 404
        _create(client, 5000, 3)
        assert client.get(f"{BASE}/product/5000").json()["quantity"] == 3


class TestUpdate:

    def test_put_updates_quantity(self, client, seeded):
        item = seeded[1]
        resp = client.put(f"{BASE}/{item['id']}", json={"product_id": item["product_id"], "quantity": 999})
        assert resp.status_code == 200
        assert resp.json()["quantity"] == 999

    def test_put_ignores_product_id_change(self, client, seeded):
        item = seeded[1]
        body = client.put(f"{BASE}/{item['id']}", json={"product_id": 1, "quantity": 5}).json()
        assert body["product_id"] == item["product_id"]

    def test_put_not_found(self, client):
        resp = client.put(f"{BASE}/999999", json={"product_id": 9999, "quantity": 100})
        assert resp.status_code == 404
        assert resp.json()["status"] == 404

    def test_put_negative(self, client, seeded):
        resp = client.put(f"{BASE}/{seeded[0]['id']}", json={"quantity": -5})
        assert resp.status_code == 400

    def test_patch_quantity(self, client, seeded):
        item = seeded[2]
        resp = client.patch(f"{BASE}/{item['id']}/quantity", json={"quantity": 500})
        assert resp.status_code == 200
        assert resp.json()["quantity"] == 500

    def test_patch_missing_quantity(self, client, seeded):
        resp = client.patch(f"{BASE}/{seeded[0]['id']}/quantity", json={})
        assert resp.status_code == 400
        body = resp.json()
        assert body["status"] == 400
        assert "Validation" in body["error"]

    def test_patch_negative(self, client, seeded):
        resp = client.patch(f"{BASE}/{seeded[0]['id']}/quantity", json={"quantity": -1})
        assert resp.status_code == 400
        assert "negative" in resp.json()["message"]

    def test_patch_not_found(self, client):
        resp = client.patch(f"{BASE}/999999/quantity", json={"quantity": 100})
        assert resp.status_code == 404

    def test_cached_reads_see_updates(self, client, seeded):
        item = seeded[4]
        # Warm both keyspaces
        client.get(f"{BASE}/{item['id']}")
        client.get(f"{BASE}/product/{item['product_id']}")

        client.patch(f"{BASE}/{item['id']}/quantity", json={"quantity": 1})

        assert client.get(f"{BASE}/{item['id']}").json()["quantity"] == 1
        assert client.get(f"{BASE}/product/{item['product_id']}").json()["quantity"] == 1


class TestDelete:

    def test_delete_then_read(self, client):
        item = _create(client, 3001, 50)
        client.get(f"{BASE}/{item['id']}")
        client.get(f"{BASE}/product/3001")

        assert client.delete(f"{BASE}/{item['id']}").status_code == 204

        assert client.get(f"{BASE}/{item['id']}").status_code == 404
        assert client.get(f"{BASE}/product/3001").status_code == 404

    def test_delete_not_found(self, client):
        assert client.delete(f"{BASE}/999999").status_code == 404


class TestCacheAdmin:

    def test_clear_caches(self, client, seeded):
        from inventory_service.main import app

        client.get(f"{BASE}/{seeded[0]['id']}")
        client.get(f"{BASE}/product/{seeded[0]['product_id']}")
        caches = app.state.inventory_caches
        assert len(caches.by_id) == 1

        assert client.delete(f"{BASE}/cache").status_code == 204
        assert len(caches.by_id) == 0
        assert len(caches.by_product_id) == 0


def test_versioned_prefix_serves_same_data(client, seeded):
    item = seeded[0]
    resp = client.get(f"/api/v1/inventory/{item['id']}")
    assert resp.status_code == 200
    assert resp.json() == item


class TestServiceEndpoints:

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "pass"
        assert client.get("/health/live").json() == {"status": "alive"}

    def test_readiness_checks_database_and_caches(self, client):
        body = client.get("/health/ready").json()
        assert body["checks"]["database:connectivity"]["status"] == "pass"
        assert body["checks"]["database:schema"]["status"] == "pass"
        assert "cache:keyspaces" in body["checks"]

    def test_metrics_report_cache_stats(self, client, seeded):
        client.get(f"{BASE}/{seeded[0]['id']}")
        client.get(f"{BASE}/{seeded[0]['id']}")
        caches = client.get("/metrics").json()["caches"]
        assert caches["inventory-cache"]["hits"] >= 1
        assert "inventory-product-cache" in caches

    def test_request_id_is_echoed(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert resp.headers["x-request-id"] == "abc-123"
