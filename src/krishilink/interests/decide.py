"""Owner decisions on buyer interests."""

from datetime import datetime
from typing import Optional
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
import structlog

from ..db import crops_collection, parse_object_id
from ..errors import InterestAlreadyDecidedError, NotFoundError
from ..models import Interest, InterestStatus

logger = structlog.get_logger()


async def _find_interest(db: AsyncIOMotorDatabase, crop_oid: ObjectId, interest_id: str) -> Optional[Interest]:
    crop = await crops_collection(db).find_one({"_id": crop_oid}, {"interests": 1})
    if not crop:
        raise NotFoundError(f"Crop {crop_oid} not found")
    for raw in crop.get("interests", []):
        if raw.get("id") == interest_id:
            return Interest.model_validate(raw)
    return None


def _decision_result(interest_id: str, status: str, modified: bool, decremented: float) -> dict:
    return {
        "acknowledged": True,
        "matchedCount": 1,
        "modifiedCount": 1 if modified else 0,
        "interestId": interest_id,
        "status": status,
        "quantityDecremented": decremented,
    }


async def update_interest_status(
    db: AsyncIOMotorDatabase,
    crop_id: str,
    interest_id: str,
    status: InterestStatus,
) -> dict:
    """Accept or reject an interest.

    Accepting decrements the listing's quantity by the interest's requested
    quantity in the same conditional update that flips the status, so an
    interest is only ever deducted once. Repeating the current decision is a
    no-op; reversing a decision raises InterestAlreadyDecidedError.

    Args:
        db: Database handle
        crop_id: Listing holding the interest
        interest_id: Interest to decide
        status: ``accepted`` or ``rejected``

    Returns:
        Write result plus the applied status and quantity decremented
    """
    crop_oid = parse_object_id(crop_id, "crop id")
    parse_object_id(interest_id, "interest id")
    status = InterestStatus(status)

    interest = await _find_interest(db, crop_oid, interest_id)
    if interest is None:
        raise NotFoundError(f"Interest {interest_id} not found on crop {crop_id}")

    if interest.status == status:
        logger.info("interest_status_unchanged", interest_id=interest_id, status=status.value)
        return _decision_result(interest_id, status.value, modified=False, decremented=0)

    if interest.status != InterestStatus.PENDING:
        raise InterestAlreadyDecidedError(
            f"Interest {interest_id} is already {interest.status}"
        )

    update = {
        "$set": {
            "interests.$.status": status.value,
            "interests.$.decidedAt": datetime.utcnow(),
        },
    }
    decrement = 0
    if status == InterestStatus.ACCEPTED:
        decrement = interest.quantity
        update["$inc"] = {"quantity": -decrement}

    # Matches only while the interest is still pending
    result = await crops_collection(db).update_one(
        {
            "_id": crop_oid,
            "interests": {
                "$elemMatch": {"id": interest_id, "status": InterestStatus.PENDING.value},
            },
        },
        update,
    )

    if result.modified_count == 0:
        # Another request decided this interest first
        current = await _find_interest(db, crop_oid, interest_id)
        if current is not None and current.status == status:
            return _decision_result(interest_id, status.value, modified=False, decremented=0)
        raise InterestAlreadyDecidedError(
            f"Interest {interest_id} was decided concurrently"
        )

    logger.info(
        "interest_status_updated",
        crop_id=crop_id,
        interest_id=interest_id,
        status=status.value,
        quantity_decremented=decrement,
    )

    return _decision_result(interest_id, status.value, modified=True, decremented=decrement)
