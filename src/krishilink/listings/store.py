"""Persistence and retrieval of crop listings."""

from datetime import datetime
from motor.motor_asyncio import AsyncIOMotorDatabase
import structlog

from ..db import (
    crops_collection,
    delete_result,
    insert_result,
    parse_object_id,
    serialize_doc,
    update_result,
)
from ..errors import NotFoundError, ValidationFailedError
from ..models import ListingCreate, ListingUpdate

logger = structlog.get_logger()


async def create_listing(db: AsyncIOMotorDatabase, listing: ListingCreate) -> dict:
    """Insert a new listing with an empty interests array.

    Returns:
        Write result with ``insertedId``
    """
    doc = listing.model_dump(by_alias=True)
    doc["interests"] = []
    doc["createdAt"] = datetime.utcnow()

    result = await crops_collection(db).insert_one(doc)

    logger.info(
        "listing_created",
        crop_id=str(result.inserted_id),
        owner_email=listing.owner.owner_email,
    )
    return insert_result(result)


async def get_all_listings(db: AsyncIOMotorDatabase) -> list[dict]:
    """Get every listing in insertion order."""
    cursor = crops_collection(db).find({})

    listings = []
    async for doc in cursor:
        listings.append(serialize_doc(doc))
    return listings


async def get_latest_listings(db: AsyncIOMotorDatabase, limit: int = 6) -> list[dict]:
    """Get the most recently created listings, newest first."""
    cursor = crops_collection(db).find({}).sort([
        ("createdAt", -1),
        ("_id", -1),
    ]).limit(limit)

    listings = []
    async for doc in cursor:
        listings.append(serialize_doc(doc))
    return listings


async def get_listing(db: AsyncIOMotorDatabase, crop_id: str) -> dict:
    """Get listing by ID, raising NotFoundError if it does not exist."""
    oid = parse_object_id(crop_id, "crop id")
    doc = await crops_collection(db).find_one({"_id": oid})
    if not doc:
        raise NotFoundError(f"Crop {crop_id} not found")
    return serialize_doc(doc)


async def get_listings_by_owner(db: AsyncIOMotorDatabase, owner_email: str) -> list[dict]:
    """Get all listings posted by an owner (exact, case-sensitive email)."""
    cursor = crops_collection(db).find({"owner.ownerEmail": owner_email})

    listings = []
    async for doc in cursor:
        listings.append(serialize_doc(doc))
    return listings


async def update_listing(db: AsyncIOMotorDatabase, crop_id: str, changes: ListingUpdate) -> dict:
    """Overwrite the supplied mutable fields of a listing.

    An unknown id is a no-op (``matchedCount == 0``), not an error.
    """
    oid = parse_object_id(crop_id, "crop id")
    updates = changes.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    if not updates:
        raise ValidationFailedError("No fields to update")
    updates["updatedAt"] = datetime.utcnow()

    result = await crops_collection(db).update_one({"_id": oid}, {"$set": updates})

    logger.info(
        "listing_updated",
        crop_id=crop_id,
        fields=sorted(k for k in updates if k != "updatedAt"),
        matched=result.matched_count,
    )
    return update_result(result)


async def delete_listing(db: AsyncIOMotorDatabase, crop_id: str) -> dict:
    """Delete a listing. Deleting a missing listing succeeds with ``deletedCount == 0``."""
    oid = parse_object_id(crop_id, "crop id")
    result = await crops_collection(db).delete_one({"_id": oid})
    if result.deleted_count > 0:
        logger.info("listing_deleted", crop_id=crop_id)
    return delete_result(result)
