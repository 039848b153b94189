import pytest
from unittest.mock import AsyncMock, patch
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from billsplit.models.user import User


@pytest.fixture
def user_repo():
    with patch("billsplit.api.v1.endpoints.users.UserRepository") as repo_cls:
        repo_cls.return_value = AsyncMock()
        yield repo_cls.return_value


def test_create_user(client, user_repo):
    user_repo.create_user.return_value = User(name="Alice", phone="0111")

    response = client.post("/api/users", json={"name": "Alice", "phone": "0111"})

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Alice"
    assert data["phone"] == "0111"
    assert "createdAt" in data
    assert ObjectId.is_valid(data["id"])


@pytest.mark.parametrize("body", [{"name": "Alice"}, {"phone": "0111"}, {"name": " ", "phone": "0111"}])
def test_create_user_missing_fields(client, user_repo, body):
    response = client.post("/api/users", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Name and phone number are required"}
    user_repo.create_user.assert_not_called()


def test_create_user_duplicate_phone(client, user_repo):
    user_repo.create_user.side_effect = DuplicateKeyError("E11000 duplicate key error")

    response = client.post("/api/users", json={"name": "Mallory", "phone": "0111"})

    assert response.status_code == 400
    assert response.json() == {"error": "Phone number already exists"}


def test_list_users(client, user_repo):
    user_repo.list_users.return_value = [
        User(name="Bob", phone="0222"),
        User(name="Alice", phone="0111"),
    ]

    response = client.get("/api/users")

    assert response.status_code == 200
    assert [u["name"] for u in response.json()] == ["Bob", "Alice"]


def test_get_user(client, user_repo):
    user = User(name="Alice", phone="0111")
    user_repo.get_user_by_id.return_value = user

    response = client.get(f"/api/users/{user.id}")

    assert response.status_code == 200
    assert response.json()["id"] == str(user.id)


def test_get_user_not_found(client, user_repo):
    user_repo.get_user_by_id.return_value = None

    response = client.get(f"/api/users/{ObjectId()}")

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_get_user_invalid_id(client, user_repo):
    response = client.get("/api/users/abc")

    assert response.status_code == 400
    user_repo.get_user_by_id.assert_not_called()


def test_update_user_only_provided_fields(client, user_repo):
    user = User(name="Alicia", phone="0111")
    user_repo.update_user.return_value = user

    response = client.put(f"/api/users/{user.id}", json={"name": "Alicia", "phone": ""})

    assert response.status_code == 200
    assert user_repo.update_user.call_args[0][1] == {"name": "Alicia"}


def test_update_user_without_changes_returns_user(client, user_repo):
    user = User(name="Alice", phone="0111")
    user_repo.get_user_by_id.return_value = user

    response = client.put(f"/api/users/{user.id}", json={})

    assert response.status_code == 200
    user_repo.update_user.assert_not_called()


def test_update_user_duplicate_phone(client, user_repo):
    user_repo.update_user.side_effect = DuplicateKeyError("E11000 duplicate key error")

    response = client.put(f"/api/users/{ObjectId()}", json={"phone": "0111"})

    assert response.status_code == 400
    assert response.json() == {"error": "Phone number already exists"}


def test_update_user_not_found(client, user_repo):
    user_repo.update_user.return_value = None

    response = client.put(f"/api/users/{ObjectId()}", json={"name": "Ghost"})

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_delete_user(client, user_repo):
    user_repo.soft_delete_user.return_value = True

    response = client.delete(f"/api/users/{ObjectId()}")

    assert response.status_code == 200
    assert response.json() == {"message": "User deleted successfully"}


def test_delete_user_not_found(client, user_repo):
    user_repo.soft_delete_user.return_value = False

    response = client.delete(f"/api/users/{ObjectId()}")

    assert response.status_code == 404
