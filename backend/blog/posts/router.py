# backend/blog/posts/router.py
from typing import Optional

from fastapi import APIRouter, Query, status

from ..auth.dependencies import CurrentUser, OptionalUser
from ..auth.schema import AuthUser
from ..config import settings
from ..database import SessionDep
from ..pagination import build_pagination, resolve_page
from . import service
from .models import PostStatus
from .schemas import (
    LikeToggleResponse,
    MessageResponse,
    PostCreate,
    PostDetail,
    PostListResponse,
    PostOut,
    PostUpdate,
)

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=PostListResponse)
async def list_posts(
    db: SessionDep,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    search: Optional[str] = None,
    tag: Optional[str] = None,
    author: Optional[int] = None,
):
    """공개(published) 게시글 목록. 다른 필터와 관계없이 draft는 제외됩니다."""
    page_no, page_size = resolve_page(
        page, limit, default_limit=settings.POSTS_PAGE_SIZE, max_limit=settings.MAX_PAGE_SIZE
    )
    criteria = service.PostFilter(search=search, tag=tag, author=author, status=PostStatus.PUBLISHED)
    posts, total = await service.list_posts(db, criteria, page=page_no, limit=page_size)
    return {"posts": posts, "pagination": build_pagination(page_no, page_size, total)}


@router.get("/mine", response_model=PostListResponse)
async def list_my_posts(
    db: SessionDep,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    post_status: Optional[PostStatus] = Query(None, alias="status"),
    current_user: AuthUser = CurrentUser,
):
    """로그인 사용자의 게시글 목록 (draft 포함)"""
    page_no, page_size = resolve_page(
        page, limit, default_limit=settings.POSTS_PAGE_SIZE, max_limit=settings.MAX_PAGE_SIZE
    )
    criteria = service.PostFilter(author=current_user.user_id, status=post_status)
    posts, total = await service.list_posts(db, criteria, page=page_no, limit=page_size)
    return {"posts": posts, "pagination": build_pagination(page_no, page_size, total)}


@router.post("", response_model=PostOut, status_code=status.HTTP_201_CREATED)
async def create_post(body: PostCreate, db: SessionDep, current_user: AuthUser = CurrentUser):
    return await service.create_post(db, body, current_user)


@router.get("/{post_id}", response_model=PostDetail)
async def get_post(post_id: int, db: SessionDep, viewer: Optional[AuthUser] = OptionalUser):
    return await service.view_post(db, post_id, viewer)


@router.put("/{post_id}", response_model=PostOut)
async def update_post(post_id: int, body: PostUpdate, db: SessionDep, current_user: AuthUser = CurrentUser):
    post = await service.get_post_or_404(db, post_id)
    service.ensure_author(post, current_user, action="edit")
    return await service.update_post(db, post, body)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(post_id: int, db: SessionDep, current_user: AuthUser = CurrentUser):
    post = await service.get_post_or_404(db, post_id)
    service.ensure_author(post, current_user, action="delete")
    await service.delete_post(db, post)
    return {"message": "Post deleted successfully"}


@router.post("/{post_id}/like", response_model=LikeToggleResponse)
async def toggle_post_like(post_id: int, db: SessionDep, current_user: AuthUser = CurrentUser):
    post = await service.get_post_or_404(db, post_id)
    liked, count = await service.toggle_like(db, post, current_user)
    return {"liked": liked, "like_count": count}
