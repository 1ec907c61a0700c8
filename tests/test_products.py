from .helpers import create_product


def test_create_and_list_products(client, owner_headers, product_store):
    sid = product_store["id"]
    first = create_product(client, owner_headers, sid, images="a.jpg, b.jpg\nc.jpg")
    assert first["images"] == ["a.jpg", "b.jpg", "c.jpg"]
    assert first["store"] == sid
    create_product(client, owner_headers, sid, name="Hidden", is_active=False)

    owner_list = client.get(f"/api/stores/{sid}/products", headers=owner_headers)
    assert owner_list.status_code == 200
    assert {p["name"] for p in owner_list.json()} == {"Coffee beans", "Hidden"}

    public = client.get(f"/api/stores/{sid}/public-products")
    assert [p["name"] for p in public.json()] == ["Coffee beans"]


def test_negative_price_rejected(client, owner_headers, product_store):
    res = client.post(
        f"/api/stores/{product_store['id']}/products",
        json={"name": "Broken", "price": -1},
        headers=owner_headers,
    )
    assert res.status_code == 400


def test_update_and_delete_product(client, owner_headers, product_store):
    sid = product_store["id"]
    product = create_product(client, owner_headers, sid)

    res = client.put(f"/api/stores/{sid}/products/{product['id']}", json={"price": 15}, headers=owner_headers)
    assert res.status_code == 200
    assert res.json()["price"] == 15
    assert res.json()["name"] == "Coffee beans"

    res = client.delete(f"/api/stores/{sid}/products/{product['id']}", headers=owner_headers)
    assert res.status_code == 200
    res = client.delete(f"/api/stores/{sid}/products/{product['id']}", headers=owner_headers)
    assert res.status_code == 404


def test_products_need_products_mode(client, owner_headers, booking_store):
    res = client.post(
        f"/api/stores/{booking_store['id']}/products",
        json={"name": "Shampoo", "price": 5},
        headers=owner_headers,
    )
    assert res.status_code == 400
    assert res.json()["message"] == "This store does not sell products"

    res = client.get(f"/api/stores/{booking_store['id']}/public-products")
    assert res.status_code == 400
    assert res.json()["message"] == "This store does not sell products"


def test_products_owner_only(client, owner_headers, other_headers, product_store):
    res = client.get(f"/api/stores/{product_store['id']}/products", headers=other_headers)
    assert res.status_code == 403
