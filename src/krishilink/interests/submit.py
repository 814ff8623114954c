"""Interest submission and per-buyer aggregation."""

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
import structlog

from ..db import crops_collection, parse_object_id, serialize_doc, update_result
from ..errors import NotFoundError
from ..models import Interest, InterestCreate, InterestStatus

logger = structlog.get_logger()


async def submit_interest(db: AsyncIOMotorDatabase, request: InterestCreate) -> dict:
    """Append a new pending interest to a listing.

    Args:
        db: Database handle
        request: Buyer's interest details

    Returns:
        Write result whose ``insertedId`` is the new interest id
    """
    crop_oid = parse_object_id(request.crop_id, "crop id")

    if request.status is not None and request.status != InterestStatus.PENDING:
        logger.warning(
            "interest_status_overridden",
            crop_id=request.crop_id,
            requested_status=request.status,
        )

    interest = Interest(
        id=str(ObjectId()),
        crop_id=request.crop_id,
        user_email=request.user_email,
        user_name=request.user_name,
        quantity=request.quantity,
        message=request.message,
        status=InterestStatus.PENDING,
    )

    result = await crops_collection(db).update_one(
        {"_id": crop_oid},
        {"$push": {"interests": interest.model_dump(by_alias=True)}},
    )
    if result.matched_count == 0:
        raise NotFoundError(f"Crop {request.crop_id} not found")

    logger.info(
        "interest_submitted",
        interest_id=interest.id,
        crop_id=request.crop_id,
        user_email=request.user_email,
        quantity=request.quantity,
    )

    return {**update_result(result), "insertedId": interest.id}


async def list_interests_for_user(db: AsyncIOMotorDatabase, user_email: str) -> list[dict]:
    """Get every interest a buyer has submitted, across all listings.

    Each record carries ``cropName``, ``ownerName`` and ``ownerEmail`` from
    its parent listing.
    """
    cursor = crops_collection(db).find(
        {"interests.userEmail": user_email},
    ).sort("_id", 1)

    interests = []
    async for doc in cursor:
        crop = serialize_doc(doc)
        owner = crop.get("owner") or {}
        for interest in crop.get("interests", []):
            if interest.get("userEmail") != user_email:
                continue
            interests.append({
                **interest,
                "cropName": crop.get("name"),
                "ownerName": owner.get("ownerName"),
                "ownerEmail": owner.get("ownerEmail"),
            })
    return interests
