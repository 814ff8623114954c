"""Seed KrishiLink with demo farmers, crops and buyer interests."""

import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dotenv import load_dotenv
load_dotenv(Path(__file__).parent.parent / ".env")

from krishilink.db import open_db, setup_indexes, crops_collection
from krishilink.interests import submit_interest
from krishilink.listings import create_listing
from krishilink.models import InterestCreate, ListingCreate, Owner, UserCreate
from krishilink.users import register_user

FARMERS = [
    UserCreate(name="Rahim Uddin", email="rahim@example.com"),
    UserCreate(name="Salma Begum", email="salma@example.com"),
]

BUYERS = [
    UserCreate(name="Karim Traders", email="karim@example.com"),
]

CROPS = [
    ("rahim@example.com", "Rahim Uddin", {
        "name": "Aman Rice",
        "type": "Grain",
        "price_per_unit": 42,
        "unit": "kg",
        "quantity": 500,
        "description": "Fine aromatic rice, harvested this season.",
        "location": "Mymensingh",
    }),
    ("rahim@example.com", "Rahim Uddin", {
        "name": "Red Lentils",
        "type": "Pulse",
        "price_per_unit": 95,
        "unit": "kg",
        "quantity": 120,
        "location": "Mymensingh",
    }),
    ("salma@example.com", "Salma Begum", {
        "name": "Tomatoes",
        "type": "Vegetable",
        "price_per_unit": 30,
        "unit": "kg",
        "quantity": 80,
        "description": "Vine-ripened, suitable for wholesale.",
        "location": "Bogura",
    }),
]


async def seed_crops(db) -> list[str]:
    count = await crops_collection(db).count_documents({})
    if count > 0:
        print(f"  crops already has {count} documents")
        return []

    crop_ids = []
    for owner_email, owner_name, fields in CROPS:
        listing = ListingCreate(
            **fields,
            owner=Owner(owner_name=owner_name, owner_email=owner_email),
        )
        result = await create_listing(db, listing)
        crop_ids.append(result["insertedId"])
    print(f"  Seeded {len(crop_ids)} crops")
    return crop_ids


async def main():
    print("=" * 50)
    print("KrishiLink Seed Data")
    print("=" * 50)

    async with open_db() as db:
        print("\n[1] Setting up indexes...")
        await setup_indexes(db)
        print("  Indexes created")

        print("\n[2] Registering users...")
        for user in FARMERS + BUYERS:
            await register_user(db, user)
        print(f"  {len(FARMERS)} farmers, {len(BUYERS)} buyers")

        print("\n[3] Seeding crops...")
        crop_ids = await seed_crops(db)

        if crop_ids:
            print("\n[4] Submitting a buyer interest...")
            buyer = BUYERS[0]
            await submit_interest(db, InterestCreate(
                crop_id=crop_ids[0],
                user_email=buyer.email,
                user_name=buyer.name,
                quantity=50,
                message="Can you deliver to Dhaka?",
            ))
            print("  Interest submitted")

    print("\n" + "=" * 50)
    print("Seed complete!")
    print("=" * 50)


if __name__ == "__main__":
    asyncio.run(main())
