"""Domain Types — rich types that replace bare primitives and ad hoc maps.

Invariants:
    - PostId wraps UUID — never pass raw strings past the validation layer
    - PostRecord is an immutable snapshot; the record store is the only producer
    - PostFields carries only the fields being written (None = leave unchanged)
    - ListQuery is already validated when constructed by the validation layer

Design Decisions:
    - NewType for identity: zero runtime cost, full type-checker support
    - Frozen dataclasses over ORM objects at the core boundary: the lifecycle
      manager never touches a live session-bound instance
    - str Enums: serialize to JSON and log extras without custom encoders
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

PostId = NewType("PostId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class AdmissionClass(str, Enum):
    """Rate budget partitions. Each admission consumes from exactly one."""
    GENERAL = "general"
    AUTHENTICATION = "authentication"
    UPLOAD = "upload"


class SortField(str, Enum):
    """Sortable post fields, keyed by their wire name."""
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    HEADING = "heading"


# ─── Value Objects ───────────────────────────────────────────────

@dataclass(frozen=True)
class PostRecord:
    """Snapshot of a persisted post."""
    id: PostId
    heading: str
    description: str
    image: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class PostFields:
    """Field values to write. None means 'not part of this write'."""
    heading: str | None = None
    description: str | None = None
    image: str | None = None

    def is_empty(self) -> bool:
        return self.heading is None and self.description is None and self.image is None


@dataclass(frozen=True)
class ImageUpload:
    """An inbound image blob with the metadata the client declared."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ListQuery:
    """Validated listing parameters."""
    page: int = 1
    limit: int = 10
    search: str | None = None
    sort_field: SortField = SortField.CREATED_AT
    descending: bool = True

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Caller identity yielded by the authorization gate."""
    subject: str
    claims: dict[str, Any] = field(default_factory=dict)
