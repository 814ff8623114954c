import uuid

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from krishilink.api import app, get_database
from krishilink.models import ListingCreate, Owner


@pytest.fixture
def db():
    return AsyncMongoMockClient()[f"krishilink_test_{uuid.uuid4().hex[:8]}"]


@pytest.fixture
def client(db):
    app.dependency_overrides[get_database] = lambda: db
    # Lifespan is not entered, so no real MongoDB connection is attempted
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_listing(**overrides) -> ListingCreate:
    fields = {
        "name": "Rice",
        "type": "Grain",
        "price_per_unit": 40.0,
        "unit": "kg",
        "quantity": 100,
        "description": "Aromatic rice",
        "location": "Mymensingh",
        "image": "https://example.com/rice.jpg",
        "owner": Owner(owner_name="Rahim", owner_email="rahim@example.com"),
    }
    fields.update(overrides)
    return ListingCreate(**fields)


def listing_payload(**overrides) -> dict:
    return make_listing(**overrides).model_dump(by_alias=True)
