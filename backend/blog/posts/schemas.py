from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ..models import CustomModel
from ..pagination import Pagination
from ..users.schema import AuthorDetail, UserRef, UserSummary
from .models import PostStatus


def _normalise_tags(tags: Optional[List[str]]) -> List[str]:
    """공백 제거 후 빈 값/중복을 제외합니다 (입력 순서 유지)."""
    result: List[str] = []
    for tag in tags or []:
        name = tag.strip()
        if name and name not in result:
            result.append(name)
    return result


def _required_text(value, label: str):
    if value is None or not str(value).strip():
        raise ValueError(f"{label} is required")
    return str(value).strip()


class PostCreate(CustomModel):
    title: str = Field(..., max_length=200)
    content: str
    excerpt: str = Field(..., max_length=300)
    image_url: Optional[str] = Field(default="", max_length=500)
    tags: List[str] = Field(default_factory=list)
    status: PostStatus = PostStatus.PUBLISHED

    @field_validator("title", "content", "excerpt", mode="before")
    @classmethod
    def _not_blank(cls, v, info):
        return _required_text(v, info.field_name.capitalize())

    @field_validator("tags", mode="before")
    @classmethod
    def _none_tags(cls, v):
        return [] if v is None else v

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, v):
        return _normalise_tags(v)


class PostUpdate(CustomModel):
    """부분 수정: 전달된 필드만 반영 (버전 체크 없음, 마지막 쓰기 우선)"""
    title: Optional[str] = Field(default=None, max_length=200)
    content: Optional[str] = None
    excerpt: Optional[str] = Field(default=None, max_length=300)
    image_url: Optional[str] = Field(default=None, max_length=500)
    tags: Optional[List[str]] = None
    status: Optional[PostStatus] = None

    @field_validator("title", "content", "excerpt", mode="before")
    @classmethod
    def _not_blank(cls, v, info):
        return _required_text(v, info.field_name.capitalize())

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, v):
        return _normalise_tags(v)


class PostOut(CustomModel):
    id: int
    title: str
    content: str
    excerpt: str
    image_url: str = ""
    tags: List[str] = Field(default_factory=list)
    status: PostStatus
    view_count: int
    like_count: int = 0
    likes: List[UserRef] = Field(default_factory=list)
    author: UserSummary
    created_at: datetime
    updated_at: datetime


class PostDetail(PostOut):
    author: AuthorDetail


class PostListResponse(CustomModel):
    posts: List[PostOut]
    pagination: Pagination


class LikeToggleResponse(CustomModel):
    liked: bool
    like_count: int


class MessageResponse(CustomModel):
    message: str
