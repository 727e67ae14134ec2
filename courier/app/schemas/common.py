"""
Shared response envelopes.

Every response carries a success flag and a human-readable message.
"""

from pydantic import BaseModel


class ActionResponse(BaseModel):
    """Schema for a mutating action with no extra payload."""
    success: bool = True
    message: str
