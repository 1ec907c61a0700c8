from datetime import datetime, timedelta, timezone

from vitrinex.routes import bookings

from .helpers import next_weekday, open_all_week

MONDAY = next_weekday(0)


def book(client, store_id, slot="09:00", day=MONDAY, **extra):
    body = {
        "customer_name": "Carla",
        "customer_email": "carla@example.com",
        "customer_phone": "+56911112222",
        "date": day.isoformat(),
        "slot": slot,
    }
    body.update(extra)
    return client.post(f"/api/stores/{store_id}/appointments", json=body)


def slots_for(client, store_id, day=MONDAY, **params):
    res = client.get(f"/api/stores/{store_id}/availability/date/{day.isoformat()}", params=params)
    assert res.status_code == 200, res.text
    return res.json()["slots"]


def test_availability_roundtrip_is_normalized(client, owner_headers, booking_store):
    sid = booking_store["id"]
    res = client.put(
        f"/api/stores/{sid}/availability",
        json={
            "availability": [
                {
                    "day_of_week": "monday",
                    "time_blocks": [
                        {"start_time": "9:00", "end_time": "11:00"},
                        {"start_time": "10:00", "end_time": "12:00"},
                    ],
                },
                {"day_of_week": "sunday", "is_closed": True},
            ]
        },
        headers=owner_headers,
    )
    assert res.status_code == 200
    weekly = res.json()["availability"]
    assert [d["day_of_week"] for d in weekly] == ["monday", "sunday"]
    assert weekly[0]["time_blocks"] == [{"start_time": "09:00", "end_time": "12:00", "slot_duration": 30}]


def test_day_view(client, booking_store):
    res = client.get(f"/api/stores/{booking_store['id']}/availability/date/{MONDAY.isoformat()}")
    body = res.json()
    assert body["is_closed"] is False
    assert body["is_special_day"] is False
    assert body["service_duration"] is None
    assert body["slots"][0] == "09:00"
    assert body["slots"][-1] == "11:30"
    assert len(body["slots"]) == 6


def test_invalid_date(client, booking_store):
    res = client.get(f"/api/stores/{booking_store['id']}/availability/date/2030-13-45")
    assert res.status_code == 400


def test_booking_removes_slot(client, booking_store):
    sid = booking_store["id"]
    res = book(client, sid, "10:00", customer_email="Carla@Example.com", notes="  first visit ")
    assert res.status_code == 201, res.text
    booking = res.json()
    assert booking["status"] == "pending"
    assert booking["duration"] == 30
    assert booking["customer_email"] == "carla@example.com"
    assert booking["notes"] == "first visit"
    assert "10:00" not in slots_for(client, sid)


def test_double_booking_conflicts(client, booking_store):
    sid = booking_store["id"]
    assert book(client, sid, "09:30").status_code == 201
    res = book(client, sid, "09:30", customer_email="other@example.com")
    assert res.status_code == 409


def test_cancelled_booking_frees_the_slot(client, owner_headers, booking_store):
    sid = booking_store["id"]
    booking = book(client, sid, "09:30").json()
    client.patch(
        f"/api/stores/{sid}/appointments/{booking['id']}/status",
        json={"status": "cancelled"},
        headers=owner_headers,
    )
    assert "09:30" in slots_for(client, sid)
    assert book(client, sid, "09:30").status_code == 201


def test_slot_outside_schedule(client, booking_store):
    res = book(client, booking_store["id"], "15:00")
    assert res.status_code == 400
    assert res.json()["message"] == "The selected slot is not available"


def test_past_date_rejected(client, booking_store):
    res = book(client, booking_store["id"], day=datetime.now(timezone.utc).date() - timedelta(days=1))
    assert res.status_code == 400


def test_invalid_booking_payload(client, booking_store):
    res = book(client, booking_store["id"], slot="9am", customer_email="nope")
    assert res.status_code == 400
    fields = {e["field"] for e in res.json()["errors"]}
    assert {"slot", "customer_email"} <= fields


def test_service_duration_drives_slots(client, owner_headers, booking_store):
    sid = booking_store["id"]
    service = client.post(
        f"/api/stores/{sid}/services",
        json={"name": "Color", "duration": 60, "price": 30000},
        headers=owner_headers,
    ).json()

    assert slots_for(client, sid, service_id=service["id"]) == ["09:00", "10:00", "11:00"]

    res = book(client, sid, "10:00", service_id=service["id"])
    assert res.status_code == 201
    booking = res.json()
    assert booking["service_name"] == "Color"
    assert booking["duration"] == 60
    assert booking["price"] == 30000

    # The hour long booking also blocks the half hour slots it covers
    free = slots_for(client, sid)
    assert "10:00" not in free
    assert "10:30" not in free
    assert "11:00" in free

    res = book(client, sid, "10:30")
    assert res.status_code == 409


def test_inactive_service_cannot_be_booked(client, owner_headers, booking_store):
    sid = booking_store["id"]
    service = client.post(
        f"/api/stores/{sid}/services",
        json={"name": "Retired", "price": 1, "is_active": False},
        headers=owner_headers,
    ).json()
    assert book(client, sid, service_id=service["id"]).status_code == 404


def test_special_days(client, owner_headers, booking_store):
    sid = booking_store["id"]
    url = f"/api/stores/{sid}/special-days"

    res = client.post(
        url, json={"date": MONDAY.isoformat(), "is_closed": True, "reason": "Holiday"}, headers=owner_headers
    )
    assert res.status_code == 200
    day = client.get(f"/api/stores/{sid}/availability/date/{MONDAY.isoformat()}").json()
    assert day["is_closed"] is True
    assert day["reason"] == "Holiday"
    assert day["slots"] == []
    assert book(client, sid).status_code == 400

    res = client.post(
        url,
        json={
            "date": MONDAY.isoformat(),
            "time_blocks": [{"start_time": "15:00", "end_time": "16:00", "slot_duration": 30}],
        },
        headers=owner_headers,
    )
    assert len(res.json()) == 1
    assert slots_for(client, sid) == ["15:00", "15:30"]

    res = client.delete(f"{url}/{MONDAY.isoformat()}", headers=owner_headers)
    assert res.status_code == 200
    assert client.get(url).json() == []
    assert client.delete(f"{url}/{MONDAY.isoformat()}", headers=owner_headers).status_code == 404


def test_open_special_day_needs_blocks(client, owner_headers, booking_store):
    res = client.post(
        f"/api/stores/{booking_store['id']}/special-days",
        json={"date": MONDAY.isoformat(), "is_closed": False},
        headers=owner_headers,
    )
    assert res.status_code == 400


def test_owner_manages_appointments(client, owner_headers, other_headers, db, booking_store):
    sid = booking_store["id"]
    first = book(client, sid, "11:00").json()
    book(client, sid, "09:00")

    listed = client.get(f"/api/stores/{sid}/appointments", headers=owner_headers).json()
    assert [b["slot"] for b in listed] == ["09:00", "11:00"]

    filtered = client.get(
        f"/api/stores/{sid}/appointments", params={"date": MONDAY.isoformat()}, headers=owner_headers
    ).json()
    assert len(filtered) == 2

    assert client.get(f"/api/stores/{sid}/appointments", headers=other_headers).status_code == 403

    res = client.patch(
        f"/api/stores/{sid}/appointments/{first['id']}/status", json={"status": "done"}, headers=owner_headers
    )
    assert res.status_code == 400

    res = client.delete(f"/api/stores/{sid}/appointments/{first['id']}", headers=owner_headers)
    assert res.status_code == 200
    assert db["booking"].count_documents({}) == 1


def test_products_store_has_no_bookings(client, product_store):
    res = client.get(f"/api/stores/{product_store['id']}/availability")
    assert res.status_code == 400
    assert res.json()["message"] == "This store does not take bookings"


def test_customer_bookings_lookup(client, booking_store):
    book(client, booking_store["id"], "09:00")
    res = client.get("/api/public/bookings", params={"email": "CARLA@example.com"})
    bookings = res.json()
    assert len(bookings) == 1
    assert bookings[0]["store_name"] == "Hair Studio"


def test_past_date_follows_utc_clock(client, booking_store, monkeypatch):
    # Once the UTC calendar has moved past MONDAY the booking is in the past
    late = datetime.combine(MONDAY + timedelta(days=1), datetime.min.time(), tzinfo=timezone.utc)
    monkeypatch.setattr(bookings, "utcnow", lambda: late)
    res = book(client, booking_store["id"])
    assert res.status_code == 400
    assert res.json()["message"] == "The selected date is in the past"


def test_open_special_day_without_blocks_is_closed(client, owner_headers, booking_store):
    sid = booking_store["id"]
    res = client.put(
        f"/api/stores/{sid}/availability",
        json={
            "availability": open_all_week(),
            "special_days": [{"date": MONDAY.isoformat(), "is_closed": False, "time_blocks": []}],
        },
        headers=owner_headers,
    )
    assert res.status_code == 200

    day = client.get(f"/api/stores/{sid}/availability/date/{MONDAY.isoformat()}").json()
    assert day["is_special_day"] is True
    assert day["is_closed"] is True
    assert day["time_blocks"] == []
    assert day["slots"] == []
    assert book(client, sid).status_code == 400
