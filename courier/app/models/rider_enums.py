"""
Rider application status enumeration.
"""

import enum


class RiderStatus(str, enum.Enum):
    """
    Rider application status.

    Status flow:
        pending → active    (promotes the applicant's user role to rider)
        pending → rejected
    Both active and rejected are terminal.
    """
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"
