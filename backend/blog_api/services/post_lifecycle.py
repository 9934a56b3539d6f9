"""Post Lifecycle Manager — sequences validation, asset handling and record writes.

Invariants:
    - Validation runs before any side effect; a ValidationFailedError or
      UnsupportedMediaError leaves both stores untouched
    - A new image is uploaded BEFORE the record write that references it
    - A replaced or orphaned image is deleted only AFTER the record write that
      stops referencing it has returned (and is therefore durable)
    - Deletion of a replaced or removed image is deferred and best-effort: it
      never fails or delays the caller's success path
    - A record write that fails after an upload deletes the fresh object
      (best-effort, AssetStore.delete never raises) before re-raising

Design Decisions:
    - Records and assets injected as Protocols, cleanup scheduling injected as
      `defer` (BackgroundTasks.add_task in the HTTP shell, a collector in tests)
    - Callers pass raw strings; the manager owns the validate -> act protocol so
      the routes stay thin (ADR: thin routes delegate to services)
    - Authorization is decided by the shell before the manager is called; the
      manager only receives the resulting identity for audit logging
"""

import logging

from blog_api.core.domain_types import (
    AuthenticatedIdentity, ImageUpload, PostFields, PostRecord,
)
from blog_api.core.errors import (
    BlogApiError, PostNotFoundError, ValidationFailedError,
)
from blog_api.core.paginate import PostPage, build_pagination
from blog_api.core.repository_protocols import (
    AssetStore, DeferTask, PostRepository,
)
from blog_api.core.validate_post import (
    check_image_upload, validate_create, validate_list_query,
    validate_post_id, validate_update,
)

logger = logging.getLogger(__name__)


class PostLifecycleManager:
    """Coordinates one post operation across the record and asset stores."""

    def __init__(
        self, records: PostRepository, assets: AssetStore, defer: DeferTask,
    ):
        self.records = records
        self.assets = assets
        self.defer = defer

    # ─── Queries ────────────────────────────────────────────────

    async def list_posts(
        self,
        page: str | None = None,
        limit: str | None = None,
        search: str | None = None,
        sort: str | None = None,
    ) -> PostPage:
        query, errors = validate_list_query(page, limit, search, sort)
        if errors:
            raise ValidationFailedError(errors)
        items, total = await self.records.list(query)
        return PostPage(items=items, pagination=build_pagination(query, total))

    async def get_post(self, raw_id: str) -> PostRecord:
        post_id, errors = validate_post_id(raw_id)
        if errors:
            raise ValidationFailedError(errors)
        post = await self.records.get(post_id)
        if post is None:
            raise PostNotFoundError(str(post_id))
        return post

    # ─── Mutations ──────────────────────────────────────────────

    async def create_post(
        self,
        identity: AuthenticatedIdentity,
        heading: str | None,
        description: str | None,
        image: ImageUpload | None = None,
    ) -> PostRecord:
        fields, errors = validate_create(heading, description)
        if errors:
            raise ValidationFailedError(errors)
        if image is not None:
            check_image_upload(image)
            url = await self.assets.upload(image)
            fields = PostFields(
                heading=fields.heading, description=fields.description, image=url,
            )

        try:
            post = await self.records.create(fields)
        except BlogApiError:
            await self._discard_new_image(fields.image)
            raise

        logger.info(
            f"Post created by {identity.subject}",
            extra={"post_id": str(post.id), "subject": identity.subject},
        )
        return post

    async def update_post(
        self,
        identity: AuthenticatedIdentity,
        raw_id: str,
        heading: str | None = None,
        description: str | None = None,
        image: ImageUpload | None = None,
    ) -> PostRecord:
        post_id, fields, errors = validate_update(raw_id, heading, description)
        if errors:
            raise ValidationFailedError(errors)
        if image is not None:
            check_image_upload(image)

        existing = await self.records.get(post_id)
        if existing is None:
            raise PostNotFoundError(str(post_id))

        new_url = None
        if image is not None:
            new_url = await self.assets.upload(image)
            fields = PostFields(
                heading=fields.heading, description=fields.description, image=new_url,
            )

        try:
            post = await self.records.update(post_id, fields)
        except BlogApiError:
            await self._discard_new_image(new_url)
            raise
        if post is None:
            # Deleted concurrently between get() and update()
            await self._discard_new_image(new_url)
            raise PostNotFoundError(str(post_id))

        if new_url and existing.image and existing.image != new_url:
            self.defer(self.assets.delete, existing.image)

        logger.info(
            f"Post updated by {identity.subject}",
            extra={"post_id": str(post_id), "subject": identity.subject},
        )
        return post

    async def delete_post(
        self, identity: AuthenticatedIdentity, raw_id: str,
    ) -> None:
        post_id, errors = validate_post_id(raw_id)
        if errors:
            raise ValidationFailedError(errors)

        existing = await self.records.get(post_id)
        if existing is None:
            raise PostNotFoundError(str(post_id))

        if not await self.records.delete(post_id):
            raise PostNotFoundError(str(post_id))
        if existing.image:
            self.defer(self.assets.delete, existing.image)

        logger.info(
            f"Post deleted by {identity.subject}",
            extra={"post_id": str(post_id), "subject": identity.subject},
        )

    # ─── Helpers ────────────────────────────────────────────────

    async def _discard_new_image(self, url: str | None) -> None:
        # Runs inline: the error response carries no background tasks
        if url:
            logger.warning("Record write failed after upload; discarding new image")
            await self.assets.delete(url)
