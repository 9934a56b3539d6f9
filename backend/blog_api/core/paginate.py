"""Pagination — builds the pagination block returned with every post listing.

Invariants:
    - totalPages = ceil(total / limit); 0 when there are no posts
    - hasMore = page * limit < total
"""

import math
from dataclasses import dataclass

from blog_api.core.domain_types import ListQuery, PostRecord


@dataclass(frozen=True)
class Pagination:
    total_pages: int
    current_page: int
    total_posts: int
    limit: int
    has_more: bool

    def to_response(self) -> dict:
        return {
            "totalPages": self.total_pages,
            "currentPage": self.current_page,
            "totalPosts": self.total_posts,
            "limit": self.limit,
            "hasMore": self.has_more,
        }


@dataclass(frozen=True)
class PostPage:
    items: list[PostRecord]
    pagination: Pagination


def build_pagination(query: ListQuery, total: int) -> Pagination:
    return Pagination(
        total_pages=math.ceil(total / query.limit),
        current_page=query.page,
        total_posts=total,
        limit=query.limit,
        has_more=query.page * query.limit < total,
    )
