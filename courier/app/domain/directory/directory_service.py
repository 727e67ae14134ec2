"""
Directory Service (Domain Logic).

User registration, role lookup and admin role management. Role writes
are single conditional updates and write the new role through to the
role cache.
"""

import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from courier.app.core.exceptions import (
    ConflictError,
    InsufficientPermissionsError,
    ResourceNotFoundError,
    ValidationError,
)
from courier.app.domain.base import StorageComponent
from courier.app.models.enums import UserRole
from courier.app.models.timestamps import as_aware, utcnow
from courier.app.models.user import User
from courier.app.schemas.user import UserCreate
from courier.app.services.role_cache import RoleCache

logger = logging.getLogger("courier.directory")

SEARCH_LIMIT = 10


class DirectoryService(StorageComponent):

    def __init__(self, db: AsyncSession, role_cache: RoleCache):
        super().__init__(db)
        self.role_cache = role_cache

    async def register(self, data: UserCreate) -> User:
        """
        Store a user on first sign-in.

        The unique index on email decides races: the loser gets a conflict.
        """
        if data.role not in (None, UserRole.USER):
            raise InsufficientPermissionsError(f"Role '{data.role.value}' cannot be self-assigned")

        now = utcnow()
        user = User(
            email=data.email,
            role=UserRole.USER,
            created_at=as_aware(data.created_at) or now,
            last_login=as_aware(data.last_login) or now,
        )
        try:
            await self._insert(user)
        except IntegrityError as exc:
            raise ConflictError("Email already exists", details={"email": data.email}) from exc

        await self.role_cache.set(user.email, UserRole.USER)
        logger.info("User %s registered", user.email)
        return user

    async def search(self, query: Optional[str]) -> List[User]:
        """Case-insensitive substring match on email, at most SEARCH_LIMIT rows."""
        if not query or not query.strip():
            raise ValidationError("Search query is required")
        result = await self._execute(
            select(User)
            .where(User.email.icontains(query.strip(), autoescape=True))
            .order_by(User.email)
            .limit(SEARCH_LIMIT)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def _stored_role(self, email: str) -> Optional[UserRole]:
        result = await self._execute(select(User.role).where(User.email == email))
        return result.scalar_one_or_none()

    async def lookup_role(self, email: str) -> Optional[UserRole]:
        """Role for ``email`` or None if unregistered, read through the cache."""
        cached = await self.role_cache.get(email)
        if cached is not None:
            return cached
        role = await self._stored_role(email)
        if role is not None:
            await self.role_cache.set(email, role)
        return role

    async def get_role(self, email: str) -> UserRole:
        """
        Public role lookup, always answered from storage.

        The stored role is written back to the cache, replacing an entry a
        lookup racing a role change may have filled with the old value.
        """
        if not email or not email.strip():
            raise ValidationError("Email is required")
        role = await self._stored_role(email)
        if role is None:
            raise ResourceNotFoundError("User", message="User not found")
        await self.role_cache.set(email, role)
        return role

    async def grant_admin(self, email: str) -> None:
        modified = await self._set_role(email, UserRole.ADMIN, User.role != UserRole.ADMIN)
        if modified == 0:
            raise ResourceNotFoundError("User", message="User not found or already admin")
        logger.info("%s is now an admin", email)

    async def revoke_admin(self, email: str, acting_email: str) -> None:
        if email == acting_email:
            raise ValidationError("Admins cannot revoke their own admin role")
        modified = await self._set_role(email, UserRole.USER, User.role == UserRole.ADMIN)
        if modified == 0:
            raise ResourceNotFoundError("User", message="User not found or already not an admin")
        logger.info("%s is no longer an admin", email)

    async def _set_role(self, email: str, role: UserRole, expected) -> int:
        modified = await self._apply(
            update(User)
            .where(User.email == email, expected)
            .values(role=role)
            .execution_options(synchronize_session=False)
        )
        if modified:
            await self.role_cache.set(email, role)
        else:
            await self.role_cache.invalidate(email)
        return modified
