from typing import Iterable, List, Optional
from uuid import UUID

from app.core import lifecycle
from app.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.models.blog import BlogPost
from app.models.user import User
from app.repositories.base import Repositories
from app.utils.helpers import normalize_text, unique_in_order, utcnow
from app.utils.logger import logger

_REQUIRED_FIELDS = ("title", "excerpt", "content", "category")


def clean_tags(tags: Optional[Iterable[str]]) -> List[str]:
    return [tag.strip() for tag in (tags or []) if tag and tag.strip()]


class BlogService:
    def __init__(self, repos: Repositories):
        self.repos = repos

    def _require_admin(self, actor: User) -> None:
        if not lifecycle.can_manage_blog(actor):
            raise ForbiddenException("Only admins can manage knowledge-base articles")

    async def list(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> List[BlogPost]:
        posts = await self.repos.posts.list(search=search, category=category)
        if tag:
            posts = [p for p in posts if tag in (p.tags or [])]
        return posts

    async def get(self, post_id: UUID) -> BlogPost:
        post = await self.repos.posts.get(post_id)
        if not post:
            raise NotFoundException("Post", str(post_id))
        return post

    async def categories(self) -> List[str]:
        posts = await self.repos.posts.list()
        return unique_in_order(p.category for p in reversed(posts))

    async def tags(self) -> List[str]:
        posts = await self.repos.posts.list()
        return unique_in_order(tag for p in reversed(posts) for tag in (p.tags or []))

    async def create(self, actor: User, **fields) -> BlogPost:
        self._require_admin(actor)
        values = {name: normalize_text(fields.get(name)) for name in _REQUIRED_FIELDS}
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise ValidationException(f"Missing required fields: {', '.join(missing)}")

        now = utcnow()
        post = BlogPost(
            **values,
            tags=clean_tags(fields.get("tags")),
            image_url=fields.get("image_url") or None,
            author_id=actor.id,
            author_name=actor.fullname,
            created_at=now,
            updated_at=now,
        )
        post = await self.repos.posts.add(post)
        logger.info(f"Blog post created: {post.id} by {actor.id}")
        return post

    async def update(self, post_id: UUID, actor: User, **fields) -> BlogPost:
        self._require_admin(actor)
        post = await self.get(post_id)

        updates = {}
        for name in _REQUIRED_FIELDS:
            if fields.get(name) is not None:
                value = normalize_text(fields[name])
                if not value:
                    raise ValidationException(f"{name} cannot be empty")
                updates[name] = value
        if fields.get("tags") is not None:
            updates["tags"] = clean_tags(fields["tags"])
        if "image_url" in fields:
            updates["image_url"] = fields["image_url"] or None

        for name, value in updates.items():
            setattr(post, name, value)
        post.updated_at = utcnow()

        post = await self.repos.posts.save(post)
        logger.info(f"Blog post updated: {post_id} by {actor.id}")
        return post

    async def delete(self, post_id: UUID, actor: User) -> None:
        self._require_admin(actor)
        await self.get(post_id)
        await self.repos.posts.delete(post_id)
        logger.info(f"Blog post deleted: {post_id} by {actor.id}")
