"""
Access policy for role-based and ownership-based access control.

``authorize`` is a pure decision over an identity and a requirement; the
``require_*`` dependencies apply it to FastAPI routes.
"""

import enum
from dataclasses import dataclass
from typing import Optional, Type

from fastapi import Depends

from courier.app.core.dependencies import Identity, get_current_identity
from courier.app.core.exceptions import (
    AppException,
    AuthenticationError,
    InsufficientPermissionsError,
)
from courier.app.models.enums import UserRole


class Requirement(str, enum.Enum):
    """
    What an operation demands of its caller.

        AUTHENTICATED: any verified identity
        ADMIN: stored role is admin
        SELF: caller email equals the resource's email (admins are not exempt)
        RIDER: stored role is rider
    """
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"
    SELF = "self"
    RIDER = "rider"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""
    error: Optional[Type[AppException]] = None

    def enforce(self) -> None:
        """Raise the matching error kind when the decision is a denial."""
        if not self.allowed:
            raise self.error(self.reason)


ALLOW = Decision(allowed=True)


def authorize(
    identity: Optional[Identity],
    requirement: Requirement,
    resource_email: Optional[str] = None,
) -> Decision:
    """
    Decide whether ``identity`` may perform an operation with ``requirement``.

    Missing identity is reported as unauthenticated; a valid identity that
    lacks the role or ownership is reported as forbidden.
    """
    if identity is None or not identity.email:
        return Decision(False, "Unauthorized access", AuthenticationError)

    if requirement == Requirement.AUTHENTICATED:
        return ALLOW

    if requirement == Requirement.ADMIN:
        if identity.role == UserRole.ADMIN:
            return ALLOW
        return Decision(False, "Admin access required", InsufficientPermissionsError)

    if requirement == Requirement.RIDER:
        if identity.role == UserRole.RIDER:
            return ALLOW
        return Decision(False, "Rider access required", InsufficientPermissionsError)

    if requirement == Requirement.SELF:
        if resource_email is not None and identity.email == resource_email:
            return ALLOW
        return Decision(False, "Forbidden access", InsufficientPermissionsError)

    return Decision(False, f"Unknown requirement {requirement}", InsufficientPermissionsError)


def require_authenticated(identity: Identity = Depends(get_current_identity)) -> Identity:
    authorize(identity, Requirement.AUTHENTICATED).enforce()
    return identity


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    """
    Dependency for admin-only endpoints.

    Usage:
        @router.get("/riders/pending")
        async def list_pending(admin: Identity = Depends(require_admin)):
            ...
    """
    authorize(identity, Requirement.ADMIN).enforce()
    return identity


def require_rider(identity: Identity = Depends(get_current_identity)) -> Identity:
    authorize(identity, Requirement.RIDER).enforce()
    return identity


def enforce_self(identity: Identity, resource_email: Optional[str]) -> None:
    """Strict ownership check for per-user resources such as payment history."""
    authorize(identity, Requirement.SELF, resource_email).enforce()
