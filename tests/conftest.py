import os

os.environ.setdefault("JWT_SECRET", "test-secret")

import mongomock  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from vitrinex.database import get_db  # noqa: E402
from vitrinex.main import app  # noqa: E402

from .helpers import create_store, open_all_week, register  # noqa: E402


@pytest.fixture
def db():
    return mongomock.MongoClient()["vitrinex_test"]


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def owner_headers(client):
    return register(client)


@pytest.fixture
def other_headers(client):
    return register(client, username="intruder", email="intruder@example.com")


@pytest.fixture
def product_store(client, owner_headers):
    return create_store(client, owner_headers)


@pytest.fixture
def booking_store(client, owner_headers):
    store = create_store(client, owner_headers, name="Hair Studio", mode="bookings", business_type="salon")
    res = client.put(
        f"/api/stores/{store['id']}/availability",
        json={"availability": open_all_week()},
        headers=owner_headers,
    )
    assert res.status_code == 200, res.text
    return store
