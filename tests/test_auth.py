from shopcart.database.core import USERS
from shopcart.utils.password_utils import verify_password

from .conftest import TEST_PASSWORD

SIGNUP = {
    "first_name": "Jane",
    "last_name": "Doe",
    "email": "jane@example.com",
    "password": "hunter22",
}


def _signin(client, email, password):
    return client.post("/auth/signin", json={"email": email, "password": password})


def test_signup_creates_user(client, db):
    response = client.post("/auth/signup", json=SIGNUP)

    assert response.status_code == 200
    assert response.json() == {"message": "User created successfully"}

    user = db[USERS].find_one({"email": "jane@example.com"})
    assert user["first_name"] == "Jane"
    assert user["password"] != "hunter22"
    assert verify_password("hunter22", user["password"])
    assert user["token"] and user["refresh_token"]
    assert user["address_details"] == []
    assert user["order_status"] == []
    assert user["user_cart"] == []
    assert user["created_at"] is not None


def test_signup_without_last_name(client, db):
    payload = {k: v for k, v in SIGNUP.items() if k != "last_name"}
    response = client.post("/auth/signup", json=payload)

    assert response.status_code == 200
    assert db[USERS].find_one({"email": "jane@example.com"})["last_name"] == ""


def test_signup_duplicate_email(client):
    assert client.post("/auth/signup", json=SIGNUP).status_code == 200

    response = client.post("/auth/signup", json={**SIGNUP, "first_name": "Janet"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "USER_ALREADY_EXISTS"


def test_signup_rejects_invalid_body(client, db):
    response = client.post("/auth/signup", json={**SIGNUP, "first_name": "Jo", "email": "not-an-email"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"]["code"] == "INVALID_INPUT"
    assert body["error"]["message"] == "Invalid request body"
    assert db[USERS].count_documents({}) == 0


def test_signin_returns_token_pair(client, test_user, db):
    response = _signin(client, test_user["email"], TEST_PASSWORD)

    assert response.status_code == 200
    pair = response.json()["message"]
    stored = db[USERS].find_one({"_id": test_user["_id"]})
    assert pair["access_token"] == stored["token"]
    assert pair["refresh_token"] == stored["refresh_token"]
    assert pair["access_token"] != test_user["token"]


def test_signin_wrong_password_keeps_existing_session(client, test_user, db):
    response = _signin(client, test_user["email"], "WrongPassword!")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INCORRECT_PASSWORD"
    stored = db[USERS].find_one({"_id": test_user["_id"]})
    assert stored["token"] == test_user["token"]
    assert stored["refresh_token"] == test_user["refresh_token"]


def test_signin_unknown_email(client):
    response = _signin(client, "nobody@example.com", "whatever")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


def test_new_signin_supersedes_previous_tokens(client, test_user):
    first = _signin(client, test_user["email"], TEST_PASSWORD).json()["message"]
    second = _signin(client, test_user["email"], TEST_PASSWORD).json()["message"]

    stale = client.get("/user/profile", headers={"Authorization": f"Bearer {first['access_token']}"})
    assert stale.status_code == 401
    assert stale.json()["error"]["code"] == "TOKEN_SUPERSEDED"

    fresh = client.get("/user/profile", headers={"Authorization": f"Bearer {second['access_token']}"})
    assert fresh.status_code == 200

    refresh = client.post("/auth/tokenrefresh", json={"refresh_token": first["refresh_token"]})
    assert refresh.status_code == 401
    assert refresh.json()["error"]["code"] == "TOKEN_SUPERSEDED"


def test_token_refresh_issues_new_access_token(client, test_user):
    pair = _signin(client, test_user["email"], TEST_PASSWORD).json()["message"]

    response = client.post("/auth/tokenrefresh", json={"refresh_token": pair["refresh_token"]})
    assert response.status_code == 200
    new_access = response.json()["message"]
    assert new_access != pair["access_token"]

    old = client.get("/user/profile", headers={"Authorization": f"Bearer {pair['access_token']}"})
    assert old.status_code == 401

    new = client.get("/user/profile", headers={"Authorization": f"Bearer {new_access}"})
    assert new.status_code == 200

    # the refresh token survives the exchange
    again = client.post("/auth/tokenrefresh", json={"refresh_token": pair["refresh_token"]})
    assert again.status_code == 200


def test_token_refresh_with_garbage(client):
    response = client.post("/auth/tokenrefresh", json={"refresh_token": "garbage"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_INVALID"


def test_token_refresh_requires_body(client):
    response = client.post("/auth/tokenrefresh", json={})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_INPUT"


def test_protected_route_without_token(client):
    response = client.get("/user/profile")

    assert response.status_code == 401
    assert response.json() == {"error": {"code": "UNAUTHORIZED", "message": "Unauthorized"}}


def test_protected_route_with_invalid_token(client):
    response = client.get("/user/cart", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_INVALID"
