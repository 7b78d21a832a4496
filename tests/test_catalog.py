"""Categories and customers."""


def test_create_and_read_category(client, seller_headers, delivery_headers):
    created = client.post(
        "/api/categories/", json={"name": "Lighting", "description": "Lamps"}, headers=seller_headers
    )
    assert created.status_code == 201
    category_id = created.json()["data"]["id"]

    listed = client.get("/api/categories/", headers=delivery_headers).json()["data"]
    assert [c["name"] for c in listed] == ["Lighting"]
    single = client.get(f"/api/categories/{category_id}", headers=delivery_headers).json()["data"]
    assert single["description"] == "Lamps"


def test_duplicate_category_name(client, seller_headers):
    client.post("/api/categories/", json={"name": "Rugs"}, headers=seller_headers)
    assert client.post("/api/categories/", json={"name": "Rugs"}, headers=seller_headers).status_code == 400


def test_missing_category_is_404(client, seller_headers):
    assert client.get("/api/categories/3", headers=seller_headers).status_code == 404


def test_create_and_read_customer(client, seller_headers):
    payload = {"name": "Luis", "contact_handle": "@luis", "phone": "555-0199", "address": "2 Side St"}
    created = client.post("/api/customers/", json=payload, headers=seller_headers)
    assert created.status_code == 201
    customer_id = created.json()["data"]["id"]

    single = client.get(f"/api/customers/{customer_id}", headers=seller_headers).json()["data"]
    assert single["contact_handle"] == "@luis"
    assert len(client.get("/api/customers/", headers=seller_headers).json()["data"]) == 1


def test_customer_name_is_required(client, seller_headers):
    response = client.post("/api/customers/", json={"phone": "1"}, headers=seller_headers)
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_missing_customer_is_404(client, seller_headers):
    assert client.get("/api/customers/8", headers=seller_headers).status_code == 404
