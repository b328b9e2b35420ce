import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import delete, func, insert, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..auth.schema import AuthUser
from ..database import fits_db_int
from ..posts import service as post_service
from .models import Comment, comment_likes
from .schemas import CommentCreate, CommentOut, CommentThread, CommentUpdate

logger = logging.getLogger(__name__)


def _with_relations(stmt):
    return stmt.options(
        selectinload(Comment.author),
        selectinload(Comment.likes),
    ).execution_options(populate_existing=True)


async def get_comment(db: AsyncSession, comment_id: int) -> Optional[Comment]:
    if not fits_db_int(comment_id):
        return None
    stmt = _with_relations(select(Comment).where(Comment.id == comment_id))
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_comment_or_404(db: AsyncSession, comment_id: int) -> Comment:
    comment = await get_comment(db, comment_id)
    if not comment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return comment


def ensure_author(comment: Comment, user: AuthUser, action: str = "edit") -> None:
    if comment.author_id != user.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Not authorized to {action} this comment")


async def list_thread(
    db: AsyncSession,
    post_id: int,
    viewer: Optional[AuthUser] = None,
    *,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[CommentThread], int]:
    """
    게시글의 댓글 스레드를 2단계로 구성합니다.

    1. 최상위 댓글(parent 없음)을 최신순으로 페이지 단위 조회
    2. 각 최상위 댓글의 직계 답글을 오래된 순으로 전부 조회해 replies에 첨부

    답글의 답글은 저장은 되지만 이 조회 경로에서는 노출되지 않습니다.
    """
    await post_service.get_visible_post_or_404(db, post_id, viewer)

    top_level_filter = (Comment.post_id == post_id, Comment.parent_comment_id.is_(None))

    total = (await db.execute(select(func.count(Comment.id)).where(*top_level_filter))).scalar_one()

    top_level = (await db.execute(
        _with_relations(
            select(Comment)
            .where(*top_level_filter)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
    )).scalars().all()

    replies_by_parent: Dict[int, List[Comment]] = defaultdict(list)
    parent_ids = [comment.id for comment in top_level]
    if parent_ids:
        replies = (await db.execute(
            _with_relations(
                select(Comment)
                .where(Comment.parent_comment_id.in_(parent_ids))
                .order_by(Comment.created_at.asc(), Comment.id.asc())
            )
        )).scalars().all()
        for reply in replies:
            replies_by_parent[reply.parent_comment_id].append(reply)

    threads: List[CommentThread] = []
    for comment in top_level:
        thread = CommentThread.model_validate(comment)
        thread.replies = [CommentOut.model_validate(reply) for reply in replies_by_parent[comment.id]]
        threads.append(thread)
    return threads, total


async def create_comment(db: AsyncSession, post_id: int, data: CommentCreate, author: AuthUser) -> Comment:
    # 남의 draft에는 댓글을 달 수 없음 (존재하지 않는 게시글과 동일하게 404)
    await post_service.get_visible_post_or_404(db, post_id, author)

    if data.parent_comment_id is not None:
        parent = await get_comment(db, data.parent_comment_id)
        # 답글은 부모와 같은 게시글에 속해야 함
        if parent is None or parent.post_id != post_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Parent comment does not belong to this post",
            )

    comment = Comment(
        content=data.content,
        author_id=author.user_id,
        post_id=post_id,
        parent_comment_id=data.parent_comment_id,
        is_edited=False,
    )
    db.add(comment)
    await db.commit()
    logger.info(f"Comment created: id={comment.id}, post_id={post_id}, parent={data.parent_comment_id}")
    return await get_comment_or_404(db, comment.id)


async def update_comment(db: AsyncSession, comment: Comment, data: CommentUpdate) -> Comment:
    comment.content = data.content
    comment.is_edited = True
    await db.commit()
    return await get_comment_or_404(db, comment.id)


async def delete_comment(db: AsyncSession, comment: Comment) -> int:
    """
    댓글과 그 직계 답글만 삭제합니다 (한 단계).
    손자 댓글은 저장소에 남지만 스레드 조회로는 더 이상 도달할 수 없습니다.
    삭제된 댓글 수를 반환합니다.
    """
    comment_id = comment.id
    target = or_(Comment.id == comment_id, Comment.parent_comment_id == comment_id)
    doomed = select(Comment.id).where(target)
    await db.execute(delete(comment_likes).where(comment_likes.c.comment_id.in_(doomed)))
    result = await db.execute(delete(Comment).where(target).execution_options(synchronize_session="fetch"))
    await db.commit()
    logger.info(f"Comment deleted: id={comment_id}, removed={result.rowcount}")
    return result.rowcount


async def toggle_like(db: AsyncSession, comment: Comment, user: AuthUser) -> Tuple[bool, int]:
    match = (
        comment_likes.c.comment_id == comment.id,
        comment_likes.c.user_id == user.user_id,
    )
    exists = (await db.execute(select(comment_likes.c.comment_id).where(*match))).first()

    if exists:
        await db.execute(delete(comment_likes).where(*match))
        liked = False
    else:
        await db.execute(insert(comment_likes).values(comment_id=comment.id, user_id=user.user_id))
        liked = True
    await db.commit()

    count = (await db.execute(
        select(func.count()).select_from(comment_likes).where(comment_likes.c.comment_id == comment.id)
    )).scalar_one()
    return liked, count
