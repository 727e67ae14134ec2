"""
User Directory API Endpoints.

Registration on first sign-in, public role lookup, and admin-only
search and role management.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from courier.app.core.dependencies import Identity, get_directory
from courier.app.core.guards import require_admin
from courier.app.db.session import get_db
from courier.app.domain.directory.directory_service import DirectoryService
from courier.app.models.enums import UserRole
from courier.app.schemas.user import (
    UserCreate, UserCreatedResponse, UserResponse, UserSearchResponse,
    RoleResponse, RoleChangeResponse,
)
from courier.app.services.audit import record_event, AuditAction

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: UserCreate,
    directory: DirectoryService = Depends(get_directory),
    db: AsyncSession = Depends(get_db)
):
    """
    Save a user on first sign-in.

    Rejects an email that is already registered (409).
    """
    user = await directory.register(user_data)
    await record_event(db, AuditAction.USER_REGISTERED, target_email=user.email)
    return UserCreatedResponse(message="User inserted successfully", inserted_id=user.id)


@router.get("/search", response_model=UserSearchResponse)
async def search_users(
    query: Optional[str] = Query(None, description="Part of an email address"),
    admin: Identity = Depends(require_admin),
    directory: DirectoryService = Depends(get_directory)
):
    """Case-insensitive email search (admin-only, at most 10 results)."""
    users = await directory.search(query)
    return UserSearchResponse(
        message=f"{len(users)} user(s) found",
        count=len(users),
        users=[UserResponse.model_validate(user) for user in users],
    )


@router.get("/role/{email}", response_model=RoleResponse)
async def get_user_role(
    email: str = Path(..., description="Registered email"),
    directory: DirectoryService = Depends(get_directory)
):
    """Public role lookup used by the web client after sign-in."""
    role = await directory.get_role(email)
    return RoleResponse(message="Role found", role=role)


@router.patch("/make-admin/{email}", response_model=RoleChangeResponse)
async def make_admin(
    email: str = Path(...),
    admin: Identity = Depends(require_admin),
    directory: DirectoryService = Depends(get_directory),
    db: AsyncSession = Depends(get_db)
):
    await directory.grant_admin(email)
    await record_event(
        db, AuditAction.ROLE_CHANGED,
        actor_email=admin.email, target_email=email,
        metadata={"new_role": UserRole.ADMIN.value},
    )
    return RoleChangeResponse(message=f"{email} is now an admin", email=email, role=UserRole.ADMIN)


@router.patch("/remove-admin/{email}", response_model=RoleChangeResponse)
async def remove_admin(
    email: str = Path(...),
    admin: Identity = Depends(require_admin),
    directory: DirectoryService = Depends(get_directory),
    db: AsyncSession = Depends(get_db)
):
    await directory.revoke_admin(email, acting_email=admin.email)
    await record_event(
        db, AuditAction.ROLE_CHANGED,
        actor_email=admin.email, target_email=email,
        metadata={"new_role": UserRole.USER.value},
    )
    return RoleChangeResponse(message=f"{email} is no longer an admin", email=email, role=UserRole.USER)
