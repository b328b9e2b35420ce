# backend/blog/comments/models.py
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, Table, Index
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


comment_likes = Table(
    "comment_likes",
    Base.metadata,
    Column("comment_id", Integer, ForeignKey("comments.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)


class Comment(Base):
    """
    게시글 댓글. parent_comment_id가 NULL이면 최상위 댓글, 아니면 답글.
    parent_comment_id는 조회용 참조일 뿐 FK 제약을 두지 않습니다
    (부모 삭제 시 손자 댓글은 저장소에 그대로 남음).
    """
    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_post_created", "post_id", "created_at"),
        Index("ix_comments_author_created", "author_id", "created_at"),
        Index("ix_comments_parent", "parent_comment_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    content = Column(String(1000), nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    parent_comment_id = Column(Integer, nullable=True)
    is_edited = Column(Boolean, default=False, server_default="0", nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    author = relationship("User")
    likes = relationship("User", secondary=comment_likes, viewonly=True, order_by="User.id")

    @property
    def like_count(self) -> int:
        return len(self.likes)

    def __repr__(self) -> str:
        return f"Comment(id={self.id}, post_id={self.post_id}, parent_comment_id={self.parent_comment_id})"
    def __str__(self) -> str:
        return f"Comment#{self.id} on Post#{self.post_id}"
