"""Post Schemas — wire representation of posts.

Invariants:
    - Field names are camelCase on the wire (createdAt, updatedAt)
    - image is always a string ("" when the post has no image)

Design Decisions:
    - from_attributes: built straight from PostRecord dataclasses
    - Input is NOT modelled here: multipart fields arrive as raw strings and
      are validated by core/validate_post so every message has one source
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from blog_api.core.domain_types import PostRecord


class PostResponse(BaseModel):
    """Public post representation."""
    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True,
    )

    id: UUID
    heading: str
    description: str
    image: str = ""
    created_at: datetime
    updated_at: datetime


def serialize_post(post: PostRecord) -> dict:
    return PostResponse.model_validate(post).model_dump(mode="json", by_alias=True)
