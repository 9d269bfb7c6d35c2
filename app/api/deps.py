from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from uuid import UUID
from app.config import settings
from app.database import get_db
from app.core.security import decode_access_token
from app.core.exceptions import UnauthorizedException, ForbiddenException
from app.models.user import User
from app.repositories.base import Repositories
from app.repositories.memory import memory_repositories
from app.repositories.sql import sql_repositories
from app.services.analytics_service import AnalyticsService
from app.services.blog_service import BlogService
from app.services.chat_service import ChatService
from app.services.review_service import ReviewService
from app.services.ticket_service import TicketService
from app.services.user_service import UserService

# auto_error=False so a missing header is a 401 rather than FastAPI's default 403
security = HTTPBearer(auto_error=False)

_memory_store: Optional[Repositories] = None


def get_memory_store() -> Repositories:
    global _memory_store
    if _memory_store is None:
        _memory_store = memory_repositories()
    return _memory_store


async def get_repositories(db: AsyncSession = Depends(get_db)) -> Repositories:
    if settings.STORAGE_BACKEND == "memory":
        return get_memory_store()
    return sql_repositories(db)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    repos: Repositories = Depends(get_repositories),
) -> User:
    if credentials is None:
        raise UnauthorizedException("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedException("Invalid authentication credentials")

    try:
        user_id = UUID(payload.get("sub") or "")
    except ValueError:
        raise UnauthorizedException("Invalid authentication credentials")

    user = await repos.users.get(user_id)
    if user is None:
        raise UnauthorizedException("User not found")

    if not user.is_active:
        raise ForbiddenException("User account is inactive")

    return user


def get_ticket_service(repos: Repositories = Depends(get_repositories)) -> TicketService:
    return TicketService(repos)


def get_review_service(repos: Repositories = Depends(get_repositories)) -> ReviewService:
    return ReviewService(repos)


def get_chat_service(repos: Repositories = Depends(get_repositories)) -> ChatService:
    return ChatService(repos)


def get_user_service(repos: Repositories = Depends(get_repositories)) -> UserService:
    return UserService(repos)


def get_blog_service(repos: Repositories = Depends(get_repositories)) -> BlogService:
    return BlogService(repos)


def get_analytics_service(repos: Repositories = Depends(get_repositories)) -> AnalyticsService:
    return AnalyticsService(repos)
