"""Post Routes — list, get, create, update and delete blog posts.

Invariants:
    - Every route is admitted by the rate limiter before anything else runs
    - Mutations authenticate after admission and before validation
    - Routes contain no business logic: they read the request and delegate to
      PostLifecycleManager
    - Image cleanup is scheduled on BackgroundTasks and runs after the response

Design Decisions:
    - All multipart fields are optional at the FastAPI layer so that missing
      fields produce the same field->messages map as every other violation
    - Image bytes read up to MAX_IMAGE_BYTES + 1: enough to detect oversize
      without buffering arbitrarily large uploads
"""

import logging

from fastapi import (
    APIRouter, BackgroundTasks, Depends, File, Form, Query, Request,
    UploadFile, status,
)
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.api.guards import (
    bearer_scheme, get_rate_limiter, get_token_verifier, guard_mutation,
    guard_read,
)
from blog_api.config import Settings, get_settings
from blog_api.core.domain_types import AdmissionClass, ImageUpload
from blog_api.core.validate_post import MAX_IMAGE_BYTES
from blog_api.infrastructure.asset_store import MinioAssetStore, get_asset_store
from blog_api.infrastructure.database import get_db
from blog_api.infrastructure.post_repository import SqlPostRepository
from blog_api.infrastructure.rate_limiter import AdmissionRateLimiter
from blog_api.infrastructure.token_verifier import TokenVerifier
from blog_api.schemas.post import serialize_post
from blog_api.services.post_lifecycle import PostLifecycleManager

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/posts", tags=["posts"])


def get_post_manager(
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    assets: MinioAssetStore = Depends(get_asset_store),
) -> PostLifecycleManager:
    return PostLifecycleManager(
        SqlPostRepository(db), assets, background_tasks.add_task,
    )


async def _read_image(upload: UploadFile | None) -> ImageUpload | None:
    """Multipart image -> ImageUpload. Empty file inputs count as no image."""
    if upload is None or not upload.filename:
        return None
    data = await upload.read(MAX_IMAGE_BYTES + 1)
    return ImageUpload(
        filename=upload.filename,
        content_type=upload.content_type or "",
        data=data,
    )


def _mutation_class(image: ImageUpload | None) -> AdmissionClass:
    return AdmissionClass.UPLOAD if image is not None else AdmissionClass.GENERAL


@router.get("", dependencies=[Depends(guard_read)])
async def list_posts(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    search: str | None = Query(None),
    sort: str | None = Query(None),
    manager: PostLifecycleManager = Depends(get_post_manager),
):
    """List posts with pagination, search over heading/description, and sort."""
    result = await manager.list_posts(page, limit, search, sort)
    return {
        "success": True,
        "posts": [serialize_post(p) for p in result.items],
        "pagination": result.pagination.to_response(),
    }


@router.get("/{post_id}", dependencies=[Depends(guard_read)])
async def get_post(
    post_id: str,
    manager: PostLifecycleManager = Depends(get_post_manager),
):
    """Get a single post by id."""
    post = await manager.get_post(post_id)
    return {"success": True, "post": serialize_post(post)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(
    request: Request,
    heading: str | None = Form(None),
    description: str | None = Form(None),
    image: UploadFile | None = File(None),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    limiter: AdmissionRateLimiter = Depends(get_rate_limiter),
    verifier: TokenVerifier = Depends(get_token_verifier),
    settings: Settings = Depends(get_settings),
    manager: PostLifecycleManager = Depends(get_post_manager),
):
    """Create a post (multipart: heading, description, optional image)."""
    upload = await _read_image(image)
    identity = await guard_mutation(
        request, _mutation_class(upload), credentials, limiter, verifier, settings,
    )
    post = await manager.create_post(identity, heading, description, upload)
    return {
        "success": True,
        "message": "Post created successfully",
        "post": serialize_post(post),
    }


@router.put("/{post_id}")
async def update_post(
    request: Request,
    post_id: str,
    heading: str | None = Form(None),
    description: str | None = Form(None),
    image: UploadFile | None = File(None),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    limiter: AdmissionRateLimiter = Depends(get_rate_limiter),
    verifier: TokenVerifier = Depends(get_token_verifier),
    settings: Settings = Depends(get_settings),
    manager: PostLifecycleManager = Depends(get_post_manager),
):
    """Partially update a post. Omitted fields keep their current value."""
    upload = await _read_image(image)
    identity = await guard_mutation(
        request, _mutation_class(upload), credentials, limiter, verifier, settings,
    )
    post = await manager.update_post(identity, post_id, heading, description, upload)
    return {
        "success": True,
        "message": "Post updated successfully",
        "post": serialize_post(post),
    }


@router.delete("/{post_id}")
async def delete_post(
    request: Request,
    post_id: str,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    limiter: AdmissionRateLimiter = Depends(get_rate_limiter),
    verifier: TokenVerifier = Depends(get_token_verifier),
    settings: Settings = Depends(get_settings),
    manager: PostLifecycleManager = Depends(get_post_manager),
):
    """Delete a post and, best-effort, its image."""
    identity = await guard_mutation(
        request, AdmissionClass.GENERAL, credentials, limiter, verifier, settings,
    )
    await manager.delete_post(identity, post_id)
    return {"success": True, "message": "Post deleted successfully"}
