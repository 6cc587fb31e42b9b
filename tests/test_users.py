import pytest
from bson import ObjectId

from shopcart.auth import service as auth_service
from shopcart.auth.models import SignUpRequest
from shopcart.core.exceptions import UserAlreadyExistsError
from shopcart.database.core import USERS
from shopcart.users.models import UpdateProfileRequest
from shopcart.users.service import UserService

ADDRESS = {
    "street": "221B Baker Street",
    "city": "London",
    "state": "Greater London",
    "postal_code": "NW1 6XE",
    "country_code": "GB",
}


def test_get_profile_hides_secrets(client, auth_headers, test_user):
    response = client.get("/user/profile", headers=auth_headers)

    assert response.status_code == 200
    profile = response.json()
    assert profile["user_id"] == str(test_user["_id"])
    assert profile["first_name"] == "Test"
    assert profile["last_name"] == "User"
    assert profile["email"] == "test@example.com"
    assert profile["address"] == []
    for secret in ("password", "token", "refresh_token"):
        assert secret not in profile


def test_update_profile(client, auth_headers, test_user, db):
    payload = {
        "first_name": "Tester",
        "last_name": "McTest",
        "email": "test@example.com",
        "address": [ADDRESS],
    }
    response = client.post("/user/profile", json=payload, headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "User updated successfully"}
    stored = db[USERS].find_one({"_id": test_user["_id"]})
    assert stored["first_name"] == "Tester"
    assert len(stored["address_details"]) == 1
    assert isinstance(stored["address_details"][0]["_id"], ObjectId)


def test_update_profile_requires_all_fields(client, auth_headers):
    response = client.post("/user/profile", json={"first_name": "Tester"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_INPUT"


def test_update_profile_email_taken(client, auth_headers):
    client.post("/auth/signup", json={
        "first_name": "Other", "email": "other@example.com", "password": "secret1",
    })
    payload = {"first_name": "Tester", "last_name": "", "email": "other@example.com", "address": []}

    response = client.post("/user/profile", json=payload, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "USER_ALREADY_EXISTS"


def test_address_lifecycle(client, auth_headers):
    empty = client.get("/user/address", headers=auth_headers)
    assert empty.status_code == 200
    assert empty.json() == {"message": []}

    created = client.post("/user/address", json=ADDRESS, headers=auth_headers)
    assert created.status_code == 201
    address_id = created.json()["id"]
    client.post("/user/address", json={**ADDRESS, "city": "Cardiff"}, headers=auth_headers)

    listed = client.get("/user/address", headers=auth_headers).json()["message"]
    assert [a["city"] for a in listed] == ["London", "Cardiff"]
    assert listed[0]["address_id"] == address_id

    deleted = client.delete(f"/user/address/{address_id}", headers=auth_headers)
    assert deleted.status_code == 200
    assert deleted.json() == {"message": f"Address with ID {address_id} deleted successfully"}

    again = client.delete(f"/user/address/{address_id}", headers=auth_headers)
    assert again.status_code == 404
    assert again.json()["error"]["code"] == "ADDRESS_NOT_FOUND"

    cleared = client.delete("/user/address", headers=auth_headers)
    assert cleared.status_code == 200
    assert client.get("/user/address", headers=auth_headers).json() == {"message": []}


def test_address_validation(client, auth_headers):
    response = client.post("/user/address", json={**ADDRESS, "city": ""}, headers=auth_headers)
    assert response.status_code == 400

    bad_id = client.delete("/user/address/123", headers=auth_headers)
    assert bad_id.status_code == 400
    assert bad_id.json()["error"] == {"code": "INVALID_ID", "message": "Invalid address ID"}


def test_profile_of_deleted_user(client, auth_headers, test_user, db):
    db[USERS].delete_one({"_id": test_user["_id"]})

    response = client.get("/user/profile", headers=auth_headers)
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNKNOWN_USER"


def test_update_profile_email_taken_without_unique_index(bare_db):
    for first_name, email in (("Alice", "a@example.com"), ("Bobby", "b@example.com")):
        auth_service.register_user(
            bare_db, SignUpRequest(first_name=first_name, email=email, password="secret1")
        )
    bob = bare_db[USERS].find_one({"email": "b@example.com"})
    changes = UpdateProfileRequest(first_name="Bobby", last_name="", email="a@example.com", address=[])

    with pytest.raises(UserAlreadyExistsError):
        UserService.update_profile(bare_db, str(bob["_id"]), changes)

    assert bare_db[USERS].count_documents({"email": "a@example.com"}) == 1

    # keeping one's own email is not a conflict
    own = UpdateProfileRequest(first_name="Robert", last_name="", email="b@example.com", address=[])
    UserService.update_profile(bare_db, str(bob["_id"]), own)
    assert bare_db[USERS].find_one({"_id": bob["_id"]})["first_name"] == "Robert"
