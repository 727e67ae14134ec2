"""
Parcel status enumerations.
"""

import enum


class PaymentStatus(str, enum.Enum):
    """
    Payment axis of the parcel lifecycle.

    Status flow (one-way):
        unpaid → paid
    """
    UNPAID = "unpaid"
    PAID = "paid"


class DeliveryStatus(str, enum.Enum):
    """
    Delivery axis of the parcel lifecycle.

    Status flow (one-way):
        not_collected → in_transit → delivered
    """
    NOT_COLLECTED = "not_collected"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
