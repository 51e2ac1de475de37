"""
Actor Role Enum.

Closed set of roles that may drive order transitions. Identity and
role are resolved by the caller before reaching the core.
"""
from enum import Enum


class Role(str, Enum):
    """Roles acting on orders."""

    KITCHEN = "KITCHEN"
    DELIVERY = "DELIVERY"
    ADMIN = "ADMIN"
    SYSTEM = "SYSTEM"  # store automation (refund cascade, stale-order cancel)
