"""User registration keyed by email."""

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
import structlog

from .db import serialize_doc, users_collection
from .errors import NotFoundError
from .models import User, UserCreate

logger = structlog.get_logger()


async def register_user(db: AsyncIOMotorDatabase, request: UserCreate) -> dict:
    """Register a user once per email.

    Re-registering an existing email returns that user's identity instead of
    failing, with ``insertedId`` set to None.
    """
    collection = users_collection(db)

    existing = await collection.find_one({"email": request.email})
    if existing:
        return _existing_result(existing)

    user = User(**request.model_dump())
    try:
        result = await collection.insert_one(user.model_dump(by_alias=True))
    except DuplicateKeyError:
        # Lost a race with a concurrent registration for the same email
        existing = await collection.find_one({"email": request.email})
        return _existing_result(existing)

    logger.info("user_registered", email=request.email)
    return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}


def _existing_result(doc: dict) -> dict:
    return {
        "acknowledged": True,
        "insertedId": None,
        "existingId": str(doc["_id"]),
        "message": "User already exists",
    }


async def get_user(db: AsyncIOMotorDatabase, email: str) -> dict:
    """Get user by email."""
    doc = await users_collection(db).find_one({"email": email})
    if not doc:
        raise NotFoundError(f"User {email} not found")
    return serialize_doc(doc)
