"""Pydantic models for KrishiLink collections and request bodies.

Documents are stored and served with camelCase keys; attributes are
snake_case with camelCase aliases.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)


# ============================================================
# Enums
# ============================================================

class InterestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# ============================================================
# User Models
# ============================================================

class UserCreate(CamelModel):
    """Registration payload. Email is the identity key."""
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    photo_url: str = Field("", alias="photoURL")


class User(UserCreate):
    created_at: datetime = Field(default_factory=datetime.utcnow)


# ============================================================
# Listing Models
# ============================================================

class Owner(CamelModel):
    owner_name: str = Field(..., min_length=1)
    owner_email: str = Field(..., min_length=3)


class ListingCreate(CamelModel):
    """Crop listing as posted by a farmer."""
    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    price_per_unit: float = Field(..., ge=0)
    unit: str = Field(..., min_length=1)
    quantity: float = Field(..., ge=0)
    description: str = ""
    location: str = ""
    image: str = ""
    owner: Owner


class ListingUpdate(CamelModel):
    """Mutable listing fields. Owner and interests cannot be changed here."""
    name: Optional[str] = Field(None, min_length=1)
    type: Optional[str] = Field(None, min_length=1)
    price_per_unit: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1)
    quantity: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    location: Optional[str] = None
    image: Optional[str] = None


# ============================================================
# Interest Models
# ============================================================

class Interest(CamelModel):
    """Buyer interest embedded in a listing's ``interests`` array."""
    id: str
    crop_id: str
    user_email: str
    user_name: str
    quantity: float
    message: str = ""
    status: InterestStatus = Field(InterestStatus.PENDING, validate_default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    decided_at: Optional[datetime] = None


class InterestCreate(CamelModel):
    crop_id: str = Field(..., min_length=1)
    user_email: str = Field(..., min_length=3)
    user_name: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0)
    message: str = ""
    # Accepted for compatibility with older clients; new interests are always pending.
    status: Optional[InterestStatus] = None


class InterestStatusUpdate(CamelModel):
    interest_id: str = Field(..., min_length=1)
    crop_id: str = Field(..., min_length=1)
    status: InterestStatus

    @field_validator("status")
    @classmethod
    def must_be_decision(cls, value: InterestStatus) -> InterestStatus:
        if value == InterestStatus.PENDING:
            raise ValueError("status must be 'accepted' or 'rejected'")
        return value
