from .helpers import create_product


def place_order(client, store_id, items, **extra):
    body = {"customer_name": "Ana", "customer_email": "Ana@Example.com", "items": items}
    body.update(extra)
    return client.post(f"/api/stores/{store_id}/orders", json=body)


def test_place_order_computes_totals(client, owner_headers, product_store):
    sid = product_store["id"]
    beans = create_product(client, owner_headers, sid, price=12.5)
    mug = create_product(client, owner_headers, sid, name="Mug", price=3.333)

    res = place_order(
        client,
        sid,
        [
            {"product_id": beans["id"], "quantity": 2},
            {"product_id": mug["id"], "quantity": 1.7},
        ],
    )
    assert res.status_code == 201, res.text
    order = res.json()
    assert order["status"] == "pending"
    assert order["customer_email"] == "ana@example.com"
    lines = {line["product_name"]: line for line in order["items"]}
    assert lines["Coffee beans"]["subtotal"] == 25.0
    assert lines["Mug"]["quantity"] == 1
    assert lines["Mug"]["subtotal"] == 3.33
    assert order["total"] == 28.33


def test_order_rejects_inactive_or_foreign_products(client, owner_headers, product_store):
    sid = product_store["id"]
    hidden = create_product(client, owner_headers, sid, is_active=False)
    res = place_order(client, sid, [{"product_id": hidden["id"], "quantity": 1}])
    assert res.status_code == 400


def test_order_needs_items(client, product_store):
    res = place_order(client, product_store["id"], [])
    assert res.status_code == 400


def test_booking_store_does_not_take_orders(client, booking_store):
    res = place_order(client, booking_store["id"], [{"product_id": "0123456789abcdef01234567"}])
    assert res.status_code == 400


def test_owner_lists_and_updates_orders(client, owner_headers, other_headers, product_store):
    sid = product_store["id"]
    beans = create_product(client, owner_headers, sid)
    order = place_order(client, sid, [{"product_id": beans["id"]}]).json()

    assert client.get(f"/api/stores/{sid}/orders", headers=other_headers).status_code == 403

    res = client.patch(
        f"/api/stores/{sid}/orders/{order['id']}/status", json={"status": "shipped"}, headers=owner_headers
    )
    assert res.status_code == 400

    res = client.patch(
        f"/api/stores/{sid}/orders/{order['id']}/status", json={"status": "confirmed"}, headers=owner_headers
    )
    assert res.status_code == 200
    assert res.json()["status"] == "confirmed"

    confirmed = client.get(f"/api/stores/{sid}/orders", params={"status": "confirmed"}, headers=owner_headers)
    assert [o["id"] for o in confirmed.json()] == [order["id"]]
    pending = client.get(f"/api/stores/{sid}/orders", params={"status": "pending"}, headers=owner_headers)
    assert pending.json() == []


def test_customer_sees_own_orders(client, owner_headers, product_store):
    sid = product_store["id"]
    beans = create_product(client, owner_headers, sid)
    place_order(client, sid, [{"product_id": beans["id"]}])

    res = client.get("/api/public/orders", params={"email": "ANA@example.com"})
    assert res.status_code == 200
    orders = res.json()
    assert len(orders) == 1
    assert orders[0]["store_name"] == "Corner Shop"
    assert client.get("/api/public/orders", params={"email": "nobody@example.com"}).json() == []
