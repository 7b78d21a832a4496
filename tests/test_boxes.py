"""Box management."""
from app.models import Box


def test_box_lifecycle_scenario(client, db, seller_headers):
    created = client.post("/api/boxes/", json={"code": "BX1", "supplier": "ACME"}, headers=seller_headers)
    assert created.status_code == 201
    box_id = created.json()["data"]["id"]
    assert created.json()["data"]["status"] == "in_progress"

    deleted = client.delete(f"/api/boxes/{box_id}", headers=seller_headers)
    assert deleted.status_code == 200

    box_id = client.post("/api/boxes/", json={"code": "BX1"}, headers=seller_headers).json()["data"]["id"]
    product = client.post(
        "/api/products/",
        data={"name": "P1", "price": "10.00", "quantity": "1", "box_id": str(box_id)},
        headers=seller_headers,
    )
    assert product.status_code == 201

    refused = client.delete(f"/api/boxes/{box_id}", headers=seller_headers)
    assert refused.status_code == 400
    assert refused.json()["details"]["total_products"] == 1
    assert db.query(Box).filter(Box.id == box_id).count() == 1


def test_duplicate_box_code_is_rejected(client, box, seller_headers):
    response = client.post("/api/boxes/", json={"code": box.code}, headers=seller_headers)
    assert response.status_code == 400


def test_box_detail_reports_units(client, box, customer, make_product, seller_headers, create_order):
    lamp = make_product(name="Lamp", quantity=2, box_id=box.id)
    make_product(name="Rug", quantity=1, box_id=box.id)
    create_order(customer.id, [lamp.id])

    data = client.get(f"/api/boxes/{box.id}", headers=seller_headers).json()["data"]
    assert data["total_products"] == 2
    assert data["units_total"] == 3
    assert data["units_sold"] == 1
    assert data["units_available"] == 2
    products = {p["name"]: p for p in data["products"]}
    assert products["Lamp"]["available"] == 1
    assert products["Rug"]["sold"] is False


def test_list_boxes_with_status_filter(client, seller_headers):
    client.post("/api/boxes/", json={"code": "A"}, headers=seller_headers)
    client.post("/api/boxes/", json={"code": "B", "status": "completed"}, headers=seller_headers)

    assert len(client.get("/api/boxes/", headers=seller_headers).json()["data"]) == 2
    completed = client.get("/api/boxes/?status=completed", headers=seller_headers).json()["data"]
    assert [b["code"] for b in completed] == ["B"]


def test_update_box(client, box, seller_headers):
    response = client.put(
        f"/api/boxes/{box.id}",
        json={"status": "archived", "notes": "done", "total_cost": 120.5},
        headers=seller_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "archived"
    assert data["notes"] == "done"
    assert data["total_cost"] == 120.5


def test_update_box_rejects_bad_status_and_taken_code(client, box, seller_headers):
    other = client.post("/api/boxes/", json={"code": "BX2"}, headers=seller_headers).json()["data"]

    assert client.put(f"/api/boxes/{box.id}", json={"status": "lost"}, headers=seller_headers).status_code == 400
    assert client.put(f"/api/boxes/{other['id']}", json={"code": box.code}, headers=seller_headers).status_code == 400


def test_box_stats(client, box, make_product, seller_headers):
    client.post("/api/boxes/", json={"code": "BX2", "status": "completed"}, headers=seller_headers)
    make_product(box_id=box.id)

    stats = client.get("/api/boxes/stats", headers=seller_headers).json()["data"]
    assert stats == {
        "total_boxes": 2,
        "in_progress": 1,
        "completed": 1,
        "archived": 0,
        "boxes_with_products": 1,
    }


def test_missing_box_is_404(client, seller_headers):
    assert client.get("/api/boxes/99", headers=seller_headers).status_code == 404
    assert client.delete("/api/boxes/99", headers=seller_headers).status_code == 404
