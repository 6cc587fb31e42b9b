import os

# Must be set before the application modules read their settings
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_JWT"] = "test-secret-key-that-is-at-least-32-bytes-long"
os.environ["MONGO_URI"] = "mongodb://localhost:27017"

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from main import app
from shopcart.auth import service as auth_service
from shopcart.auth.models import SignUpRequest
from shopcart.database.core import PRODUCTS, USERS, ensure_indexes, get_db

TEST_PASSWORD = "ValidPassword123!"


@pytest.fixture(scope="function")
def db():
    """
    Creates a new, isolated in-memory document store for each test.
    """
    database = mongomock.MongoClient(tz_aware=True)["shopcart_test"]
    ensure_indexes(database)
    try:
        yield database
    finally:
        database.drop_collection(USERS)
        database.drop_collection(PRODUCTS)


@pytest.fixture(scope="function")
def bare_db():
    """
    A store whose unique indexes were never built, as after a start-up with the database down.
    """
    return mongomock.MongoClient(tz_aware=True)["shopcart_no_indexes"]


@pytest.fixture(scope="function")
def client(db, mocker):
    """
    Creates a TestClient for the app, pointing every request and the lifespan at the test store.
    """
    mocker.patch("main.get_database", return_value=db)
    mocker.patch("main.close_client", return_value=None)

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def test_user(db):
    """
    Registers a pre-defined user and returns its stored document.
    """
    request = SignUpRequest(
        first_name="Test",
        last_name="User",
        email="test@example.com",
        password=TEST_PASSWORD,
    )
    auth_service.register_user(db, request)
    return db[USERS].find_one({"email": "test@example.com"})


@pytest.fixture(scope="function")
def auth_headers(client, test_user):
    """
    Signs in the `test_user` and returns valid authorization headers.
    """
    response = client.post("/auth/signin", json={"email": test_user["email"], "password": TEST_PASSWORD})
    assert response.status_code == 200, "Failed to sign in test user for auth_headers"

    token = response.json()["message"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def products(db):
    """
    Seeds three catalog entries and returns their ids as strings, cheapest first.
    """
    documents = [
        {"_id": ObjectId(), "product_name": "Blue Widget", "price": 10.0, "rating": 4.5, "image_url": "https://img.test/blue.png"},
        {"_id": ObjectId(), "product_name": "Red Gadget", "price": 25.0, "rating": 3.0, "image_url": "https://img.test/red.png"},
        {"_id": ObjectId(), "product_name": "Green Widget XL", "price": 40.0, "rating": 5.0, "image_url": "https://img.test/green.png"},
    ]
    db[PRODUCTS].insert_many(documents)
    return [str(d["_id"]) for d in documents]


@pytest.fixture(scope="function")
def product(products):
    return products[0]
