"""MongoDB connection lifecycle and document helpers for KrishiLink."""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult
import structlog

from .config import Settings, get_settings
from .errors import InvalidIdentifierError, StoreUnavailableError

logger = structlog.get_logger()


def serialize_doc(doc: dict) -> dict:
    """Convert MongoDB document to JSON-serializable dict.

    The top-level ``_id`` is exposed as ``id``.
    """
    if doc is None:
        return None
    result = {}
    for key, value in doc.items():
        if isinstance(value, ObjectId):
            result[key] = str(value)
        elif isinstance(value, datetime):
            result[key] = value.isoformat()
        elif isinstance(value, dict):
            result[key] = serialize_doc(value)
        elif isinstance(value, list):
            result[key] = [
                serialize_doc(v) if isinstance(v, dict)
                else str(v) if isinstance(v, ObjectId)
                else v.isoformat() if isinstance(v, datetime)
                else v
                for v in value
            ]
        else:
            result[key] = value
    if "_id" in result:
        result["id"] = result.pop("_id")
    return result


def parse_object_id(value: str, name: str = "id") -> ObjectId:
    """Validate an opaque identifier before it reaches the store."""
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise InvalidIdentifierError(name, value)
    return ObjectId(value)


# ============================================================
# Write results
# ============================================================

def insert_result(result: InsertOneResult) -> dict:
    """Descriptor for a single insert, with the new id as a string."""
    return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}


def update_result(result: UpdateResult) -> dict:
    """Descriptor for a single update: matched and modified counts."""
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
    }


def delete_result(result: DeleteResult) -> dict:
    """Descriptor for a single delete: how many documents were removed."""
    return {"acknowledged": result.acknowledged, "deletedCount": result.deleted_count}


# ============================================================
# Connection lifecycle
# ============================================================

async def ping(client: AsyncIOMotorClient) -> None:
    """Round-trip to the server, raising StoreUnavailableError on failure."""
    try:
        await client.admin.command("ping")
    except ConnectionFailure as e:
        raise StoreUnavailableError(f"Database connection failed: {e}") from e


@asynccontextmanager
async def open_db(settings: Optional[Settings] = None) -> AsyncIterator[AsyncIOMotorDatabase]:
    """Connect once, yield the database, and close the client on exit."""
    settings = settings or get_settings()
    client = AsyncIOMotorClient(
        settings.mongodb_uri,
        serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
    )
    try:
        await ping(client)
        logger.info("mongodb_connected", database=settings.mongodb_database)
        yield client[settings.mongodb_database]
    finally:
        client.close()
        logger.info("mongodb_disconnected")


# ============================================================
# Collections
# ============================================================

def crops_collection(db: AsyncIOMotorDatabase) -> AsyncIOMotorCollection:
    return db[get_settings().crops_collection]


def users_collection(db: AsyncIOMotorDatabase) -> AsyncIOMotorCollection:
    return db[get_settings().users_collection]


async def setup_indexes(db: AsyncIOMotorDatabase):
    """Create indexes for all collections."""
    users = users_collection(db)
    await users.create_index([("email", 1)], unique=True)

    crops = crops_collection(db)
    await crops.create_index([("createdAt", -1)])
    await crops.create_index([("owner.ownerEmail", 1)])
    await crops.create_index([("interests.userEmail", 1)])

    logger.info("indexes_created")
