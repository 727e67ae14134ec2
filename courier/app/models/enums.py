"""
User roles enumeration.

Defines the role types for the parcel courier system.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        USER: Default role, books and pays for parcels
        RIDER: Approved rider, delivers assigned parcels
        ADMIN: Approves riders, assigns parcels, manages roles
    """
    USER = "user"
    RIDER = "rider"
    ADMIN = "admin"


def enum_values(enum_cls) -> list:
    """Persist enum values (the wire strings) rather than member names."""
    return [member.value for member in enum_cls]
