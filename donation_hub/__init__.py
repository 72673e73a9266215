"""Donation matching marketplace.

Donors list items, receivers post needs and an admin approves both and
pairs them into matches. ``Marketplace`` is the entry point.
"""

from donation_hub.marketplace import Marketplace
from donation_hub.utils.auth_helper import Actor
from donation_hub.utils.errors import OperationResult

__all__ = ["Marketplace", "Actor", "OperationResult"]
