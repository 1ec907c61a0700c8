from datetime import date, datetime, timedelta, timezone

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def next_weekday(weekday: int) -> date:
    """First date strictly after today (UTC) falling on ``weekday`` (0 = Monday)."""
    day = datetime.now(timezone.utc).date() + timedelta(days=1)
    while day.weekday() != weekday:
        day += timedelta(days=1)
    return day


def open_all_week(start="09:00", end="12:00", slot_duration=30):
    return [
        {
            "day_of_week": day,
            "is_closed": False,
            "time_blocks": [{"start_time": start, "end_time": end, "slot_duration": slot_duration}],
        }
        for day in WEEKDAYS
    ]


def register(client, username="owner", email="owner@example.com", password="secret123"):
    res = client.post("/api/auth/register", json={"username": username, "email": email, "password": password})
    assert res.status_code == 201, res.text
    # Later requests authenticate through the header only
    client.cookies.clear()
    return {"Authorization": f"Bearer {res.json()['token']}"}


def create_store(client, headers, **overrides):
    body = {"name": "Corner Shop", "mode": "products", "city": "Santiago", "business_type": "retail"}
    body.update(overrides)
    res = client.post("/api/stores/my", json=body, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def create_product(client, headers, store_id, **overrides):
    body = {"name": "Coffee beans", "price": 12.5, "stock": 20}
    body.update(overrides)
    res = client.post(f"/api/stores/{store_id}/products", json=body, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()
