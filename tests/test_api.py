"""HTTP routes, exercised through FastAPI's TestClient."""

from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from krishilink.api import app, get_database

from tests.conftest import listing_payload


def _create_crop(client, **overrides) -> str:
    response = client.post("/crops", json=listing_payload(**overrides))
    assert response.status_code == 200
    return response.json()["insertedId"]


def _submit(client, crop_id, quantity=30, **extra) -> str:
    body = {
        "cropId": crop_id,
        "userEmail": "karim@example.com",
        "userName": "Karim",
        "quantity": quantity,
        "message": "Interested",
        **extra,
    }
    response = client.post("/interests", json=body)
    assert response.status_code == 200
    return response.json()["insertedId"]


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["name"] == "KrishiLink"


def test_full_accept_scenario(client):
    crop_id = _create_crop(client, name="Rice", quantity=100)
    interest_id = _submit(client, crop_id, quantity=30, status="pending")

    response = client.put("/interests/update", json={
        "interestId": interest_id,
        "cropId": crop_id,
        "status": "accepted",
    })
    assert response.status_code == 200
    assert response.json()["quantityDecremented"] == 30

    crop = client.get(f"/crops/{crop_id}").json()
    assert crop["quantity"] == 70
    assert crop["interests"][0]["id"] == interest_id
    assert crop["interests"][0]["status"] == "accepted"


def test_reject_keeps_quantity(client):
    crop_id = _create_crop(client, quantity=100)
    interest_id = _submit(client, crop_id)

    response = client.put("/interests/update", json={
        "interestId": interest_id,
        "cropId": crop_id,
        "status": "rejected",
    })

    assert response.status_code == 200
    assert client.get(f"/crops/{crop_id}").json()["quantity"] == 100


def test_reversing_decision_returns_conflict(client):
    crop_id = _create_crop(client)
    interest_id = _submit(client, crop_id)
    body = {"interestId": interest_id, "cropId": crop_id, "status": "accepted"}
    client.put("/interests/update", json=body)

    response = client.put("/interests/update", json={**body, "status": "rejected"})

    assert response.status_code == 409
    assert response.json()["error"] == "interest_already_decided"


def test_update_status_to_pending_is_invalid(client):
    crop_id = _create_crop(client)
    interest_id = _submit(client, crop_id)

    response = client.put("/interests/update", json={
        "interestId": interest_id,
        "cropId": crop_id,
        "status": "pending",
    })

    assert response.status_code == 422
    assert response.json()["status"] == "error"


def test_update_unknown_interest_is_not_found(client):
    crop_id = _create_crop(client)

    response = client.put("/interests/update", json={
        "interestId": str(ObjectId()),
        "cropId": crop_id,
        "status": "accepted",
    })

    assert response.status_code == 404


def test_interest_on_missing_crop_is_not_found(client):
    response = client.post("/interests", json={
        "cropId": str(ObjectId()),
        "userEmail": "karim@example.com",
        "userName": "Karim",
        "quantity": 5,
    })

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_interest_requires_positive_quantity(client):
    crop_id = _create_crop(client)

    response = client.post("/interests", json={
        "cropId": crop_id,
        "userEmail": "karim@example.com",
        "userName": "Karim",
        "quantity": 0,
    })

    assert response.status_code == 422
    assert response.json()["error"] == "validation_failed"
    assert "quantity" in response.json()["message"]


def test_my_interests(client):
    crop_id = _create_crop(client, name="Wheat")
    interest_id = _submit(client, crop_id)

    records = client.get("/my-interests/karim@example.com").json()

    assert len(records) == 1
    assert records[0]["id"] == interest_id
    assert records[0]["cropName"] == "Wheat"
    assert records[0]["ownerEmail"] == "rahim@example.com"


def test_crop_with_invalid_id_is_client_error(client):
    response = client.get("/crops/not-an-id")

    assert response.status_code == 400
    assert response.json() == {
        "status": "error",
        "error": "invalid_identifier",
        "message": "Invalid crop id: 'not-an-id'",
    }


def test_missing_crop_is_not_found(client):
    response = client.get(f"/crops/{ObjectId()}")

    assert response.status_code == 404


def test_create_crop_missing_fields(client):
    response = client.post("/crops", json={"name": "Rice"})

    assert response.status_code == 422


def test_latest_and_all_crops(client):
    for i in range(8):
        _create_crop(client, name=f"crop-{i}")

    latest = client.get("/crops/latest").json()
    assert [c["name"] for c in latest] == [f"crop-{i}" for i in range(7, 1, -1)]

    assert len(client.get("/crops/latest", params={"limit": 2}).json()) == 2
    assert len(client.get("/crops").json()) == 8


def test_my_crops(client):
    _create_crop(client, name="Mine")
    client.post("/crops", json={
        **listing_payload(name="Theirs"),
        "owner": {"ownerName": "Salma", "ownerEmail": "salma@example.com"},
    })

    mine = client.get("/my-crops/rahim@example.com").json()

    assert [c["name"] for c in mine] == ["Mine"]


def test_update_crop_leaves_owner_and_interests(client):
    crop_id = _create_crop(client)
    _submit(client, crop_id)

    response = client.put(f"/crops/{crop_id}", json={
        "pricePerUnit": 55,
        "owner": {"ownerName": "Mallory", "ownerEmail": "mallory@example.com"},
    })
    assert response.status_code == 200
    assert response.json()["modifiedCount"] == 1

    crop = client.get(f"/crops/{crop_id}").json()
    assert crop["pricePerUnit"] == 55
    assert crop["owner"]["ownerEmail"] == "rahim@example.com"
    assert len(crop["interests"]) == 1


def test_delete_crop_is_idempotent(client):
    crop_id = _create_crop(client)

    first = client.delete(f"/crops/{crop_id}")
    second = client.delete(f"/crops/{crop_id}")

    assert first.json()["deletedCount"] == 1
    assert second.status_code == 200
    assert second.json()["deletedCount"] == 0


def test_users_register_once(client):
    body = {"name": "Karim", "email": "karim@example.com", "photoURL": "https://example.com/k.png"}

    first = client.post("/users", json=body).json()
    second = client.post("/users", json=body).json()

    assert first["insertedId"]
    assert second["insertedId"] is None
    assert second["existingId"] == first["insertedId"]

    user = client.get("/users/karim@example.com").json()
    assert user["photoURL"] == "https://example.com/k.png"


def test_unknown_user_is_not_found(client):
    assert client.get("/users/ghost@example.com").status_code == 404


class _FailingDatabase:
    name = "krishilink_test"

    async def command(self, name):
        raise ServerSelectionTimeoutError("no servers available")


class _HealthyDatabase:
    name = "krishilink_test"

    async def command(self, name):
        return {"ok": 1.0}


def test_health_ok(client):
    app.dependency_overrides[get_database] = lambda: _HealthyDatabase()

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "OK",
        "message": "Server and Database are running",
        "database": "krishilink_test",
    }


def test_health_reports_database_failure(client):
    app.dependency_overrides[get_database] = lambda: _FailingDatabase()

    response = client.get("/health")

    assert response.status_code == 500
    assert response.json()["status"] == "ERROR"
    assert "no servers available" in response.json()["error"]


def test_store_outage_maps_to_503(client):
    class _Unreachable:
        def __getitem__(self, name):
            raise ServerSelectionTimeoutError("connection refused")

    app.dependency_overrides[get_database] = lambda: _Unreachable()

    response = client.get("/crops")

    assert response.status_code == 503
    assert response.json()["error"] == "store_unavailable"
