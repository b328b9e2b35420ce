import logging
from dataclasses import dataclass
from typing import Optional, List, Tuple

from fastapi import HTTPException, status
from sqlalchemy import and_, delete, false, func, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..auth.schema import AuthUser
from ..comments.models import Comment, comment_likes
from ..database import fits_db_int
from .models import Post, PostStatus, PostTag, post_likes
from .schemas import PostCreate, PostUpdate

logger = logging.getLogger(__name__)


@dataclass
class PostFilter:
    """
    목록 조회 조건. 각 필드는 독립적으로 선택 사항이며 하나의 조건식으로 변환됩니다.
    - search: 제목/본문에 검색어 중 하나라도 포함 (대소문자 무시, %와 _도 글자 그대로)
    - tag: 태그 목록에 정확히 일치하는 값이 있음
    - author: 작성자 id 일치
    - status: 상태 일치 (공개 목록은 항상 published)
    """
    search: Optional[str] = None
    tag: Optional[str] = None
    author: Optional[int] = None
    status: Optional[PostStatus] = PostStatus.PUBLISHED

    def conditions(self) -> list:
        conditions = []
        if self.status is not None:
            conditions.append(Post.status == self.status)
        if self.search and self.search.strip():
            terms = self.search.split()
            conditions.append(or_(*[
                or_(Post.title.icontains(term, autoescape=True), Post.content.icontains(term, autoescape=True))
                for term in terms
            ]))
        if self.tag and self.tag.strip():
            conditions.append(Post.tag_links.any(PostTag.name == self.tag.strip()))
        if self.author is not None:
            conditions.append(Post.author_id == self.author if fits_db_int(self.author) else false())
        return conditions


def _with_relations(stmt):
    return stmt.options(
        selectinload(Post.author),
        selectinload(Post.tag_links),
        selectinload(Post.likes),
    ).execution_options(populate_existing=True)


async def get_post(db: AsyncSession, post_id: int) -> Optional[Post]:
    if not fits_db_int(post_id):
        return None
    stmt = _with_relations(select(Post).where(Post.id == post_id))
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_post_or_404(db: AsyncSession, post_id: int) -> Post:
    post = await get_post(db, post_id)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


async def get_visible_post_or_404(db: AsyncSession, post_id: int, viewer: Optional[AuthUser]) -> Post:
    """draft는 작성자 본인에게만 존재하는 것으로 취급"""
    post = await get_post_or_404(db, post_id)
    if post.status == PostStatus.DRAFT and (viewer is None or viewer.user_id != post.author_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


def ensure_author(post: Post, user: AuthUser, action: str = "edit") -> None:
    # 존재하지만 작성자가 아닌 경우 404가 아니라 403
    if post.author_id != user.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Not authorized to {action} this post")


async def list_posts(
    db: AsyncSession,
    criteria: PostFilter,
    *,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Post], int]:
    conditions = criteria.conditions()
    where = and_(*conditions) if conditions else True

    total = (await db.execute(select(func.count(Post.id)).where(where))).scalar_one()

    stmt = _with_relations(
        select(Post)
        .where(where)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all()), total


async def view_post(db: AsyncSession, post_id: int, viewer: Optional[AuthUser]) -> Post:
    """
    게시글 상세 조회. 조회할 때마다 view_count를 1 증가시킵니다.
    동일 사용자의 반복 조회도 모두 집계합니다 (중복 제거 없음).
    """
    await get_visible_post_or_404(db, post_id, viewer)

    # 원자적 증가: 읽기와 동기화되지 않으므로 동시 삭제 시 0건 갱신으로 끝남
    await db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(view_count=Post.view_count + 1)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return await get_post_or_404(db, post_id)


def _apply_tags(post: Post, tags: List[str]) -> None:
    # 유지되는 태그는 기존 행을 재사용 (uq_post_tags_post_name 충돌 방지)
    existing = {link.name: link for link in post.tag_links}
    post.tag_links = [existing.get(name) or PostTag(name=name) for name in tags]


async def create_post(db: AsyncSession, data: PostCreate, author: AuthUser) -> Post:
    post = Post(
        title=data.title,
        content=data.content,
        excerpt=data.excerpt,
        image_url=data.image_url or "",
        status=data.status,
        view_count=0,
        author_id=author.user_id,
    )
    _apply_tags(post, data.tags)
    db.add(post)
    await db.commit()
    logger.info(f"Post created: id={post.id}, author_id={author.user_id}, status={post.status.value}")
    return await get_post_or_404(db, post.id)


async def update_post(db: AsyncSession, post: Post, data: PostUpdate) -> Post:
    update_data = data.model_dump(exclude_unset=True)
    tags = update_data.pop("tags", None)

    for field, value in update_data.items():
        if field == "image_url" and value is None:
            value = ""
        if field == "status" and value is None:
            continue
        setattr(post, field, value)
    if tags is not None:
        _apply_tags(post, tags)

    await db.commit()
    return await get_post_or_404(db, post.id)


async def delete_post(db: AsyncSession, post: Post) -> None:
    """게시글을 완전히 삭제합니다. 태그/좋아요/댓글도 함께 제거됩니다."""
    post_id = post.id
    comment_ids = select(Comment.id).where(Comment.post_id == post_id)
    await db.execute(delete(comment_likes).where(comment_likes.c.comment_id.in_(comment_ids)))
    await db.execute(delete(Comment).where(Comment.post_id == post_id))
    await db.execute(delete(post_likes).where(post_likes.c.post_id == post_id))
    await db.execute(delete(PostTag).where(PostTag.post_id == post_id))
    await db.execute(delete(Post).where(Post.id == post_id))
    await db.commit()
    logger.info(f"Post deleted: id={post_id}")


async def toggle_like(db: AsyncSession, post: Post, user: AuthUser) -> Tuple[bool, int]:
    exists = (await db.execute(
        select(post_likes.c.post_id).where(
            post_likes.c.post_id == post.id,
            post_likes.c.user_id == user.user_id,
        )
    )).first()

    if exists:
        await db.execute(
            delete(post_likes).where(
                post_likes.c.post_id == post.id,
                post_likes.c.user_id == user.user_id,
            )
        )
        liked = False
    else:
        await db.execute(insert(post_likes).values(post_id=post.id, user_id=user.user_id))
        liked = True
    await db.commit()

    count = (await db.execute(
        select(func.count()).select_from(post_likes).where(post_likes.c.post_id == post.id)
    )).scalar_one()
    return liked, count
