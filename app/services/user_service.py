import secrets
from typing import List, Optional
from uuid import UUID

from app.config import settings
from app.core import lifecycle
from app.core.exceptions import (
    BadRequestException, ConflictException, ForbiddenException, NotFoundException,
    UnauthorizedException, ValidationException,
)
from app.core.permissions import Role, Permission, has_permission
from app.core.security import get_password_hash, verify_password
from app.models.user import User
from app.repositories.base import Repositories
from app.utils.helpers import normalize_text, utcnow
from app.utils.logger import logger


class UserService:
    def __init__(self, repos: Repositories):
        self.repos = repos

    async def register(
        self,
        fullname: str,
        email: str,
        password: str,
        admin_code: Optional[str] = None,
    ) -> User:
        fullname = normalize_text(fullname)
        if not fullname:
            raise ValidationException("Full name is required")
        if await self.repos.users.get_by_email(email):
            raise ConflictException("User with this email already exists")

        role = Role.CUSTOMER
        if admin_code and settings.ADMIN_SIGNUP_CODE and secrets.compare_digest(admin_code, settings.ADMIN_SIGNUP_CODE):
            role = Role.ADMIN

        now = utcnow()
        user = User(
            fullname=fullname,
            email=email,
            hashed_password=get_password_hash(password),
            role=role,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        user = await self.repos.users.add(user)
        logger.info(f"User registered: {user.email} ({role.value})")
        return user

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.repos.users.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            raise UnauthorizedException("Incorrect email or password")
        if not user.is_active:
            raise ForbiddenException("User account is inactive")

        user.last_login = utcnow()
        user = await self.repos.users.save(user)
        logger.info(f"User logged in: {user.email}")
        return user

    async def update_profile(
        self,
        user: User,
        fullname: Optional[str] = None,
        email: Optional[str] = None,
        bio: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> User:
        """Update the caller's own profile. Role is never touched here."""
        if email and email.lower() != user.email.lower():
            existing = await self.repos.users.get_by_email(email)
            if existing and existing.id != user.id:
                raise ConflictException("Email already in use")
        if fullname is not None and not normalize_text(fullname):
            raise ValidationException("Full name cannot be empty")

        if email:
            user.email = email
        if fullname is not None:
            user.fullname = normalize_text(fullname)
        if bio is not None:
            user.bio = bio
        if avatar_url is not None:
            user.avatar_url = avatar_url or None
        user.updated_at = utcnow()

        user = await self.repos.users.save(user)
        logger.info(f"User profile updated: {user.id}")
        return user

    async def list(self, actor: User, role: Optional[Role] = None, search: Optional[str] = None) -> List[User]:
        if not has_permission(actor.role, Permission.READ_USERS):
            raise ForbiddenException("Insufficient permissions")
        return await self.repos.users.list(role=role, search=search)

    async def get(self, user_id: UUID, actor: User) -> User:
        if not has_permission(actor.role, Permission.READ_USERS) and user_id != actor.id:
            raise ForbiddenException("Insufficient permissions")
        user = await self.repos.users.get(user_id)
        if not user:
            raise NotFoundException("User", str(user_id))
        return user

    async def change_role(self, user_id: UUID, new_role: Role, actor: User) -> User:
        if not has_permission(actor.role, Permission.MANAGE_USERS):
            raise ForbiddenException("Insufficient permissions")
        user = await self.repos.users.get(user_id)
        if not user:
            raise NotFoundException("User", str(user_id))
        if not lifecycle.can_change_role(user, actor):
            raise ForbiddenException("You cannot change your own role")

        user.role = Role(new_role)
        user.updated_at = utcnow()
        user = await self.repos.users.save(user)
        logger.info(f"User role updated: {user_id} to {user.role.value} by {actor.id}")
        return user

    async def deactivate(self, user_id: UUID, actor: User) -> None:
        if not has_permission(actor.role, Permission.MANAGE_USERS):
            raise ForbiddenException("Insufficient permissions")
        if user_id == actor.id:
            raise BadRequestException("Cannot delete your own account")
        user = await self.repos.users.get(user_id)
        if not user:
            raise NotFoundException("User", str(user_id))

        # Soft delete: tickets and messages keep pointing at the user
        user.is_active = False
        user.updated_at = utcnow()
        await self.repos.users.save(user)
        logger.info(f"User deleted (soft): {user_id} by {actor.id}")
