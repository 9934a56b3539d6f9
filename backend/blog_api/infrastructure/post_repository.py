"""Post Repository — SQLAlchemy implementation of the PostRepository protocol.

Invariants:
    - Only component with durable side effects on post records
    - Every write commits before returning; a returned PostRecord is durable
    - update() always advances updated_at, even when no column value changes
    - Every SQLAlchemy failure is rolled back and mapped to DatabaseError
    - Search is a case-insensitive literal substring over heading OR description

Design Decisions:
    - Returns frozen PostRecord snapshots, never live ORM instances
      (ADR: core stays independent of session lifetime)
    - LIKE wildcards in the search term are escaped: the term is matched literally
    - id is a secondary sort key so page boundaries are stable under equal timestamps
"""

import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.core.domain_types import (
    ListQuery, PostFields, PostId, PostRecord, SortField,
)
from blog_api.core.errors import DatabaseError
from blog_api.models.post import Post, utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SORT_COLUMNS = {
    SortField.CREATED_AT: Post.created_at,
    SortField.UPDATED_AT: Post.updated_at,
    SortField.HEADING: Post.heading,
}


def _to_record(post: Post) -> PostRecord:
    return PostRecord(
        id=PostId(post.id),
        heading=post.heading,
        description=post.description,
        image=post.image or "",
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


def _escape_like(term: str) -> str:
    return (
        term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )


class SqlPostRepository:
    """Post persistence over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _run(self, operation: str, work: Callable[[], Awaitable[T]]) -> T:
        try:
            return await work()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(f"Post {operation} violated a constraint: {e}")
            raise DatabaseError("Integrity constraint violated", operation)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Post {operation} failed: {e}", exc_info=True)
            raise DatabaseError("Database operation failed", operation)

    async def create(self, fields: PostFields) -> PostRecord:
        async def work() -> PostRecord:
            post = Post(
                heading=fields.heading,
                description=fields.description,
                image=fields.image or "",
            )
            self.db.add(post)
            await self.db.commit()
            await self.db.refresh(post)
            return _to_record(post)

        return await self._run("create", work)

    async def get(self, post_id: PostId) -> PostRecord | None:
        async def work() -> PostRecord | None:
            post = await self.db.get(Post, post_id)
            return _to_record(post) if post else None

        return await self._run("get", work)

    async def update(
        self, post_id: PostId, fields: PostFields,
    ) -> PostRecord | None:
        async def work() -> PostRecord | None:
            post = await self.db.get(Post, post_id, populate_existing=True)
            if post is None:
                return None
            if fields.heading is not None:
                post.heading = fields.heading
            if fields.description is not None:
                post.description = fields.description
            if fields.image is not None:
                post.image = fields.image
            post.updated_at = utcnow()
            await self.db.commit()
            await self.db.refresh(post)
            return _to_record(post)

        return await self._run("update", work)

    async def delete(self, post_id: PostId) -> bool:
        async def work() -> bool:
            post = await self.db.get(Post, post_id)
            if post is None:
                return False
            await self.db.delete(post)
            await self.db.commit()
            return True

        return await self._run("delete", work)

    async def list(self, query: ListQuery) -> tuple[list[PostRecord], int]:
        async def work() -> tuple[list[PostRecord], int]:
            criteria = []
            if query.search:
                pattern = f"%{_escape_like(query.search)}%"
                criteria.append(or_(
                    Post.heading.ilike(pattern, escape="\\"),
                    Post.description.ilike(pattern, escape="\\"),
                ))

            column = _SORT_COLUMNS[query.sort_field]
            order = column.desc() if query.descending else column.asc()
            tiebreak = Post.id.desc() if query.descending else Post.id.asc()

            items = await self.db.execute(
                select(Post)
                .where(*criteria)
                .order_by(order, tiebreak)
                .limit(query.limit)
                .offset(query.skip),
            )
            total = await self.db.execute(
                select(func.count()).select_from(Post).where(*criteria),
            )
            return (
                [_to_record(p) for p in items.scalars().all()],
                total.scalar_one(),
            )

        return await self._run("list", work)
