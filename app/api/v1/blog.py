from fastapi import APIRouter, Depends, status, Query
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field
from app.api.deps import get_current_user, get_blog_service
from app.models.user import User
from app.services.blog_service import BlogService

router = APIRouter()


class BlogPostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    excerpt: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    tags: List[str] = []
    image_url: Optional[str] = None


class BlogPostUpdate(BaseModel):
    title: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    image_url: Optional[str] = None


class BlogPostResponse(BaseModel):
    id: UUID
    title: str
    excerpt: str
    content: str
    category: str
    tags: List[str]
    image_url: Optional[str] = None
    author_id: UUID
    author_name: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


@router.get("", response_model=List[BlogPostResponse])
async def list_posts(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    blog: BlogService = Depends(get_blog_service),
):
    """Knowledge-base articles, newest first"""
    return await blog.list(search=search, category=category, tag=tag)


@router.get("/categories", response_model=List[str])
async def list_categories(
    current_user: User = Depends(get_current_user),
    blog: BlogService = Depends(get_blog_service),
):
    return await blog.categories()


@router.get("/tags", response_model=List[str])
async def list_tags(
    current_user: User = Depends(get_current_user),
    blog: BlogService = Depends(get_blog_service),
):
    return await blog.tags()


@router.get("/{post_id}", response_model=BlogPostResponse)
async def get_post(
    post_id: UUID,
    current_user: User = Depends(get_current_user),
    blog: BlogService = Depends(get_blog_service),
):
    return await blog.get(post_id)


@router.post("", response_model=BlogPostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: BlogPostCreate,
    current_user: User = Depends(get_current_user),
    blog: BlogService = Depends(get_blog_service),
):
    """Publish an article (admin only)"""
    return await blog.create(current_user, **post_data.model_dump())


@router.put("/{post_id}", response_model=BlogPostResponse)
async def update_post(
    post_id: UUID,
    post_data: BlogPostUpdate,
    current_user: User = Depends(get_current_user),
    blog: BlogService = Depends(get_blog_service),
):
    """Edit an article (admin only)"""
    return await blog.update(post_id, current_user, **post_data.model_dump(exclude_unset=True))


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: UUID,
    current_user: User = Depends(get_current_user),
    blog: BlogService = Depends(get_blog_service),
):
    await blog.delete(post_id, current_user)
