from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ..models import CustomModel
from ..pagination import Pagination
from ..users.schema import UserRef, UserSummary


class CommentUpdate(CustomModel):
    content: str = Field(..., max_length=1000)

    @field_validator("content", mode="before")
    @classmethod
    def _not_blank(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Comment content is required")
        return str(v).strip()


class CommentCreate(CommentUpdate):
    parent_comment_id: Optional[int] = None


class CommentOut(CustomModel):
    id: int
    content: str
    post_id: int
    parent_comment_id: Optional[int] = None
    author: UserSummary
    likes: List[UserRef] = Field(default_factory=list)
    like_count: int = 0
    is_edited: bool
    created_at: datetime
    updated_at: datetime


class CommentThread(CommentOut):
    """최상위 댓글 + 직계 답글 (2단계까지만 노출)"""
    replies: List[CommentOut] = Field(default_factory=list)


class CommentListResponse(CustomModel):
    comments: List[CommentThread]
    pagination: Pagination
