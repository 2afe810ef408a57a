from datetime import date
from types import SimpleNamespace

import pytest

from bistro import main
from bistro.services import excel_manager


def order_body(menu, **overrides):
    body = {
        "order_type": "TAKEAWAY",
        "items": [
            {"product_id": menu["steak"].id, "quantity": 1, "price": 32.99},
            {"product_id": menu["cake"].id, "quantity": 2, "price": 8.99},
        ],
        "total": 50.97,
    }
    body.update(overrides)
    return body


async def place_order(client, menu, **overrides):
    response = await client.post("/api/orders", json=order_body(menu, **overrides))
    assert response.status_code == 201, response.text
    return response.json()


# =============================================================================
# MENU & CATALOG
# =============================================================================

async def test_root(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["menu"] == "/api/menu"


async def test_menu(client, menu):
    response = await client.get("/api/menu")

    assert response.status_code == 200
    data = response.json()
    assert [c["name"] for c in data] == ["Desserts", "Main Courses"]
    mains = data[1]
    assert [p["name"] for p in mains["products"]] == ["Ribeye Steak"]
    assert mains["products"][0]["price"] == 32.99


async def test_catalog_administration(client, menu):
    response = await client.post("/api/categories", json={"name": "Beverages"})
    assert response.status_code == 201
    category_id = response.json()["id"]

    response = await client.post(
        "/api/products",
        json={"name": "Lemonade", "price": 3.5, "category_id": category_id},
    )
    assert response.status_code == 201
    product = response.json()
    assert product["available"] is True

    response = await client.post(f"/api/products/{product['id']}/toggle-availability")
    assert response.json()["available"] is False

    response = await client.patch(f"/api/products/{product['id']}", json={"price": 3.75})
    assert response.json()["price"] == 3.75

    response = await client.delete(f"/api/categories/{category_id}")
    assert response.status_code == 409
    assert response.json()["error"] == "Conflict"

    assert (await client.delete(f"/api/products/{product['id']}")).status_code == 204
    assert (await client.delete(f"/api/categories/{category_id}")).status_code == 204
    assert (await client.get(f"/api/products/{product['id']}")).status_code == 404


async def test_product_with_negative_price_is_rejected(client, menu):
    response = await client.post(
        "/api/products",
        json={"name": "Refund", "price": -1, "category_id": menu["mains"].id},
    )
    assert response.status_code == 422


# =============================================================================
# ORDERS
# =============================================================================

async def test_place_order(client, menu):
    order = await place_order(client, menu)

    assert order["status"] == "PENDING"
    assert order["total"] == 50.97
    assert order["table_number"] is None
    assert [i["product_name"] for i in order["items"]] == ["Ribeye Steak", "Chocolate Cake"]


async def test_place_order_without_total(client, menu):
    body = order_body(menu, order_type="DINE_IN", table_number="9")
    del body["total"]

    response = await client.post("/api/orders", json=body)
    assert response.status_code == 201
    assert response.json()["total"] == 50.97
    assert response.json()["table_number"] == "9"


async def test_dine_in_without_table_is_rejected(client, menu):
    response = await client.post("/api/orders", json=order_body(menu, order_type="DINE_IN"))
    assert response.status_code == 422


async def test_empty_order_is_rejected(client, menu):
    response = await client.post("/api/orders", json=order_body(menu, items=[]))
    assert response.status_code == 422


async def test_mismatched_total_is_rejected(client, menu):
    response = await client.post("/api/orders", json=order_body(menu, total=10))

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Validation Error"


async def test_unknown_product_is_not_found(client, menu):
    body = order_body(menu, items=[{"product_id": 999, "quantity": 1, "price": 1}], total=1)
    response = await client.post("/api/orders", json=body)
    assert response.status_code == 404


async def test_kitchen_workflow(client, menu):
    order = await place_order(client, menu)
    order_id = order["id"]

    for expected in ("IN_PROGRESS", "READY"):
        response = await client.post(f"/api/orders/{order_id}/advance")
        assert response.status_code == 200
        assert response.json()["status"] == expected

    response = await client.patch(f"/api/orders/{order_id}/status", json={"status": "COMPLETED"})
    assert response.status_code == 200
    assert response.json()["status"] == "COMPLETED"
    assert response.json()["updated_at"] is not None

    response = await client.get("/api/orders/active")
    assert response.json() == {"total": 0, "orders": []}


async def test_status_errors(client, menu):
    order = await place_order(client, menu)
    url = f"/api/orders/{order['id']}/status"

    response = await client.patch(url, json={"status": "SHIPPED"})
    assert response.status_code == 400

    response = await client.patch(url, json={"status": "in_progress"})
    assert response.status_code == 400

    response = await client.patch(url, json={"status": "READY"})
    assert response.status_code == 409
    assert response.json()["error"] == "Invalid Status Transition"

    response = await client.patch("/api/orders/9999/status", json={"status": "READY"})
    assert response.status_code == 404


async def test_active_orders_queue(client, menu):
    first = await place_order(client, menu)
    second = await place_order(client, menu)
    await client.patch(f"/api/orders/{second['id']}/status", json={"status": "CANCELLED"})

    response = await client.get("/api/orders/active")
    data = response.json()
    assert data["total"] == 2
    assert [o["id"] for o in data["orders"]] == [first["id"], second["id"]]
    assert (await client.get(f"/api/orders/{first['id']}")).json()["status"] == "PENDING"


# =============================================================================
# CUSTOMERS
# =============================================================================

async def test_customers(client, menu):
    response = await client.post("/api/customers", json={"email": "Sam@Example.com", "name": "Sam"})
    assert response.status_code == 201
    customer = response.json()
    assert customer["email"] == "sam@example.com"

    response = await client.post("/api/customers", json={"email": "sam@example.com"})
    assert response.status_code == 409

    await place_order(client, menu, customer_id=customer["id"])

    listing = (await client.get("/api/customers")).json()
    assert listing["total_customers"] == 1
    assert listing["customers"][0]["order_count"] == 1

    response = await client.patch(f"/api/customers/{customer['id']}", json={"phone": "555-0000"})
    assert response.json()["phone"] == "555-0000"

    assert (await client.delete(f"/api/customers/{customer['id']}")).status_code == 204
    assert (await client.get(f"/api/customers/{customer['id']}")).status_code == 404


# =============================================================================
# SALES
# =============================================================================

async def complete_order(client, menu, **overrides):
    order = await place_order(client, menu, **overrides)
    for _ in range(3):
        await client.post(f"/api/orders/{order['id']}/advance")
    return order


async def test_daily_sales_report(client, menu):
    await complete_order(client, menu)
    await complete_order(client, menu, order_type="DINE_IN", table_number="2")
    await place_order(client, menu)

    response = await client.get("/api/admin/sales", params={"date": date.today().isoformat()})

    assert response.status_code == 200
    data = response.json()
    assert data["selected_date"] == date.today().isoformat()
    assert data["statistics"]["total_orders"] == 2
    assert data["statistics"]["total_revenue"] == 101.94
    assert data["statistics"]["average_order_value"] == 50.97
    assert data["statistics"]["dine_in_orders"] == 1
    assert data["top_products"][0] == {"name": "Chocolate Cake", "quantity": 4, "revenue": 35.96}
    assert len(data["orders"]) == 2


async def test_daily_sales_for_empty_day(client, menu):
    response = await client.get("/api/admin/sales", params={"date": "2001-01-01"})
    assert response.status_code == 200
    assert response.json()["statistics"]["total_orders"] == 0


async def test_daily_sales_rejects_bad_date(client):
    response = await client.get("/api/admin/sales", params={"date": "yesterday"})
    assert response.status_code == 422


async def test_download_sales_report(client, menu, tmp_path, monkeypatch):
    monkeypatch.setattr(excel_manager, "DATA_DIR", tmp_path)
    await complete_order(client, menu)

    response = await client.get("/api/admin/sales/export")

    assert response.status_code == 200
    assert response.headers["content-type"] == main.XLSX_MEDIA_TYPE
    assert response.content[:2] == b"PK"
    assert (tmp_path / f"sales-report-{date.today().isoformat()}.xlsx").exists()


async def test_download_sales_report_failure(client, menu, monkeypatch):
    monkeypatch.setattr(
        main.ExcelManager,
        "export_sales_report",
        classmethod(lambda cls, data: {"success": False, "message": "Lock timeout (30s)"}),
    )
    response = await client.get("/api/admin/sales/export")

    assert response.status_code == 503
    assert response.json()["detail"] == "Lock timeout (30s)"


async def test_queue_sales_report_export(client, menu, monkeypatch):
    queued = []

    def fake_delay(report_data):
        queued.append(report_data)
        return SimpleNamespace(id="task-123")

    monkeypatch.setattr(main.export_sales_report_to_excel, "delay", fake_delay)
    await complete_order(client, menu)

    response = await client.post("/api/admin/sales/export", params={"date": date.today().isoformat()})

    assert response.status_code == 202
    assert response.json()["task_id"] == "task-123"
    assert queued[0]["date"] == date.today().isoformat()
    assert queued[0]["statistics"]["total_orders"] == 1


@pytest.mark.parametrize("path", ["/api/orders/abc", "/api/products/abc"])
async def test_non_numeric_ids(client, path):
    assert (await client.get(path)).status_code == 422
