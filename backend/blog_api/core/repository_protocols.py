"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - AssetStore.delete never raises: cleanup is best-effort, so the contract
      itself carries the guarantee instead of every caller wrapping it
"""

from typing import Any, Callable, Protocol

from blog_api.core.domain_types import (
    ImageUpload, ListQuery, PostFields, PostId, PostRecord,
)


class PostRepository(Protocol):
    """Contract for post persistence — implemented by shell."""
    async def create(self, fields: PostFields) -> PostRecord: ...
    async def get(self, post_id: PostId) -> PostRecord | None: ...
    async def update(
        self, post_id: PostId, fields: PostFields,
    ) -> PostRecord | None: ...
    async def delete(self, post_id: PostId) -> bool: ...
    async def list(self, query: ListQuery) -> tuple[list[PostRecord], int]: ...


class AssetStore(Protocol):
    """Contract for remote image storage — implemented by shell."""
    async def upload(self, image: ImageUpload) -> str: ...
    async def delete(self, url: str) -> None: ...


# Schedules a non-critical side effect to run after the caller's success path.
DeferTask = Callable[..., Any]
