"""Buyer interest workflow."""

from .submit import submit_interest, list_interests_for_user
from .decide import update_interest_status

__all__ = ["submit_interest", "list_interests_for_user", "update_interest_status"]
