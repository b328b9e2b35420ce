# backend/blog/comments/router.py
from typing import Optional

from fastapi import APIRouter, status

from ..auth.dependencies import CurrentUser, OptionalUser
from ..auth.schema import AuthUser
from ..config import settings
from ..database import SessionDep
from ..pagination import build_pagination, resolve_page
from ..posts.schemas import LikeToggleResponse, MessageResponse
from . import service
from .schemas import CommentCreate, CommentListResponse, CommentOut, CommentUpdate

router = APIRouter(tags=["comments"])


@router.get("/posts/{post_id}/comments", response_model=CommentListResponse)
async def list_comments(
    post_id: int,
    db: SessionDep,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    viewer: Optional[AuthUser] = OptionalUser,
):
    page_no, page_size = resolve_page(
        page, limit, default_limit=settings.COMMENTS_PAGE_SIZE, max_limit=settings.MAX_PAGE_SIZE
    )
    threads, total = await service.list_thread(db, post_id, viewer, page=page_no, limit=page_size)
    return {"comments": threads, "pagination": build_pagination(page_no, page_size, total)}


@router.post("/posts/{post_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def create_comment(
    post_id: int,
    body: CommentCreate,
    db: SessionDep,
    current_user: AuthUser = CurrentUser,
):
    return await service.create_comment(db, post_id, body, current_user)


@router.put("/comments/{comment_id}", response_model=CommentOut)
async def update_comment(
    comment_id: int,
    body: CommentUpdate,
    db: SessionDep,
    current_user: AuthUser = CurrentUser,
):
    comment = await service.get_comment_or_404(db, comment_id)
    service.ensure_author(comment, current_user, action="edit")
    return await service.update_comment(db, comment, body)


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(comment_id: int, db: SessionDep, current_user: AuthUser = CurrentUser):
    comment = await service.get_comment_or_404(db, comment_id)
    service.ensure_author(comment, current_user, action="delete")
    await service.delete_comment(db, comment)
    return {"message": "Comment deleted successfully"}


@router.post("/comments/{comment_id}/like", response_model=LikeToggleResponse)
async def toggle_comment_like(comment_id: int, db: SessionDep, current_user: AuthUser = CurrentUser):
    comment = await service.get_comment_or_404(db, comment_id)
    liked, count = await service.toggle_like(db, comment, current_user)
    return {"liked": liked, "like_count": count}
