"""Crop listing store."""

from .store import (
    create_listing,
    get_all_listings,
    get_latest_listings,
    get_listing,
    get_listings_by_owner,
    update_listing,
    delete_listing,
)

__all__ = [
    "create_listing",
    "get_all_listings",
    "get_latest_listings",
    "get_listing",
    "get_listings_by_owner",
    "update_listing",
    "delete_listing",
]
