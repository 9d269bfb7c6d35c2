from fastapi import APIRouter, Depends, status, Query
from typing import List, Optional
from uuid import UUID
from app.api.deps import get_current_user, get_user_service
from app.models.user import User
from app.schemas.user import UserResponse, UserUpdate, RoleUpdate
from app.core.permissions import Role
from app.services.user_service import UserService

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return current_user


@router.put("/me", response_model=UserResponse)
async def update_current_user(
    user_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Update current user profile"""
    return await users.update_profile(
        current_user,
        fullname=user_data.fullname,
        email=user_data.email,
        bio=user_data.bio,
        avatar_url=user_data.avatar_url,
    )


@router.get("", response_model=List[UserResponse])
async def list_users(
    role: Optional[Role] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """List users (admin only)"""
    return await users.list(current_user, role=role, search=search)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Get user by ID (admin, or the user themself)"""
    return await users.get(user_id, current_user)


@router.put("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: UUID,
    role_data: RoleUpdate,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Update another user's role (admin only)"""
    return await users.change_role(user_id, role_data.role, current_user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Deactivate a user (admin only)"""
    await users.deactivate(user_id, current_user)
