# backend/blog/posts/models.py
from enum import Enum as PyEnum
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, Table,
    Enum as SQLEnum, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base

class PostStatus(str, PyEnum):
    DRAFT = "draft"          # 작성자 본인만 열람
    PUBLISHED = "published"  # 공개 목록에 노출


# 좋아요: (게시글, 사용자) 쌍의 집합
post_likes = Table(
    "post_likes",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)


class PostTag(Base):
    __tablename__ = "post_tags"
    __table_args__ = (
        UniqueConstraint("post_id", "name", name="uq_post_tags_post_name"),
        Index("ix_post_tags_name", "name"),
    )

    id = Column(Integer, primary_key=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(50), nullable=False)

    def __repr__(self) -> str:
        return f"PostTag(post_id={self.post_id}, name={self.name!r})"


class Post(Base):
    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_status_created", "status", "created_at"),
        Index("ix_posts_author_created", "author_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(String(300), nullable=False)
    image_url = Column(String(500), default="", nullable=False)
    status = Column(
        SQLEnum(PostStatus, name="post_status", values_callable=lambda e: [m.value for m in e]),
        default=PostStatus.PUBLISHED,
        nullable=False,
    )
    view_count = Column(Integer, default=0, server_default="0", nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    author = relationship("User")
    tag_links = relationship(
        "PostTag",
        cascade="all, delete-orphan",
        order_by="PostTag.id",
    )
    likes = relationship("User", secondary=post_likes, viewonly=True, order_by="User.id")

    @property
    def tags(self) -> list[str]:
        return [link.name for link in self.tag_links]

    @property
    def like_count(self) -> int:
        return len(self.likes)

    def __repr__(self) -> str:
        return f"Post(id={self.id}, title={self.title!r}, status={self.status!r}, author_id={self.author_id})"
    def __str__(self) -> str:
        return self.title
