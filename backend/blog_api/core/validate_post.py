"""Post Input Validation — pure checks on list, create, update, get and delete inputs.

Invariants:
    - PURE: no I/O, no logging, no state — same input, same output
    - Every validator returns (normalized_value, errors); errors maps field name
      to an ordered list of human-readable messages, empty when the input is valid
    - Business-logic conditions (not-found) are never decided here
    - check_image_upload is the single exception: it raises UnsupportedMediaError,
      because media rejection carries its own error class and status

Design Decisions:
    - Raw strings in, typed values out: the HTTP shell does no coercion, so every
      message a client can see originates in this module
    - Empty-string fields on update count as omitted (multipart forms send blanks)
"""

import os
from uuid import UUID

from blog_api.core.domain_types import (
    ImageUpload, ListQuery, PostFields, PostId, SortField,
)
from blog_api.core.errors import UnsupportedMediaError


HEADING_MIN_LENGTH: int = 3
HEADING_MAX_LENGTH: int = 200
DESCRIPTION_MIN_LENGTH: int = 10
SEARCH_MAX_LENGTH: int = 100

DEFAULT_PAGE: int = 1
# Largest row offset a 64-bit database integer can carry
MAX_OFFSET: int = 2**63 - 1
DEFAULT_LIMIT: int = 10
MAX_LIMIT: int = 100
DEFAULT_SORT: str = "-createdAt"

MAX_IMAGE_BYTES: int = 5 * 1024 * 1024
ALLOWED_IMAGE_TYPES: frozenset[str] = frozenset(
    {"jpeg", "jpg", "png", "gif", "webp"},
)

HEADING_LENGTH_MESSAGE = (
    f"Heading must be between {HEADING_MIN_LENGTH} and {HEADING_MAX_LENGTH} characters"
)
DESCRIPTION_LENGTH_MESSAGE = (
    f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters"
)
INVALID_ID_MESSAGE = "Invalid post ID"
IMAGE_TYPE_MESSAGE = "Only image files (jpg, jpeg, png, gif, webp) are allowed!"
IMAGE_SIZE_MESSAGE = "Image exceeds the 5MB size limit"

Errors = dict[str, list[str]]


def _add(errors: Errors, field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)


# ─── Identifiers ────────────────────────────────────────────────

def validate_post_id(raw: str) -> tuple[PostId | None, Errors]:
    """Get/delete: the path identifier must be a syntactically valid UUID."""
    try:
        return PostId(UUID(raw.strip())), {}
    except (ValueError, AttributeError):
        return None, {"id": [INVALID_ID_MESSAGE]}


# ─── Field checks ───────────────────────────────────────────────

def _check_heading(value: str, errors: Errors) -> str:
    value = value.strip()
    if not HEADING_MIN_LENGTH <= len(value) <= HEADING_MAX_LENGTH:
        _add(errors, "heading", HEADING_LENGTH_MESSAGE)
    return value


def _check_description(value: str, errors: Errors) -> str:
    value = value.strip()
    if len(value) < DESCRIPTION_MIN_LENGTH:
        _add(errors, "description", DESCRIPTION_LENGTH_MESSAGE)
    return value


def validate_create(
    heading: str | None, description: str | None,
) -> tuple[PostFields, Errors]:
    """Creation: both fields required, trimmed, length-bounded."""
    errors: Errors = {}

    if heading is None or not heading.strip():
        _add(errors, "heading", "Heading is required")
    if heading is not None:
        heading = _check_heading(heading, errors)

    if description is None or not description.strip():
        _add(errors, "description", "Description is required")
    if description is not None:
        description = _check_description(description, errors)

    return PostFields(heading=heading, description=description), errors


def validate_update(
    raw_id: str, heading: str | None, description: str | None,
) -> tuple[PostId | None, PostFields, Errors]:
    """Update: valid id; heading/description optional with creation bounds."""
    post_id, errors = validate_post_id(raw_id)

    if heading is not None and heading != "":
        heading = _check_heading(heading, errors)
    else:
        heading = None
    if description is not None and description != "":
        description = _check_description(description, errors)
    else:
        description = None

    return post_id, PostFields(heading=heading, description=description), errors


# ─── Listing ────────────────────────────────────────────────────

def _parse_int(raw: str) -> int | None:
    try:
        return int(raw.strip())
    except ValueError:
        return None


def _parse_sort(raw: str) -> tuple[SortField, bool] | None:
    descending = raw.startswith("-")
    name = raw[1:] if descending else raw
    try:
        return SortField(name), descending
    except ValueError:
        return None


def validate_list_query(
    page: str | None = None,
    limit: str | None = None,
    search: str | None = None,
    sort: str | None = None,
) -> tuple[ListQuery | None, Errors]:
    """Listing: page >= 1, 1 <= limit <= 100, search <= 100 chars, known sort field."""
    errors: Errors = {}

    page_value = DEFAULT_PAGE
    if page is not None:
        parsed = _parse_int(page)
        if parsed is None or parsed < 1:
            _add(errors, "page", "Page must be a positive integer")
        else:
            page_value = parsed

    limit_value = DEFAULT_LIMIT
    if limit is not None:
        parsed = _parse_int(limit)
        if parsed is None or not 1 <= parsed <= MAX_LIMIT:
            _add(errors, "limit", f"Limit must be between 1 and {MAX_LIMIT}")
        else:
            limit_value = parsed

    search_value = None
    if search is not None:
        search_value = search.strip() or None
        if search_value and len(search_value) > SEARCH_MAX_LENGTH:
            _add(errors, "search", "Search query too long")

    if "page" not in errors and (page_value - 1) * limit_value > MAX_OFFSET:
        _add(errors, "page", "Page must be a positive integer")

    sort_spec = _parse_sort((sort or DEFAULT_SORT).strip())
    if sort_spec is None:
        _add(errors, "sort", "Invalid sort field")

    if errors:
        return None, errors
    sort_field, descending = sort_spec
    return ListQuery(
        page=page_value,
        limit=limit_value,
        search=search_value,
        sort_field=sort_field,
        descending=descending,
    ), {}


# ─── Media ──────────────────────────────────────────────────────

def check_image_upload(image: ImageUpload) -> None:
    """Raise UnsupportedMediaError unless extension AND MIME type are allowed and size fits."""
    extension = os.path.splitext(image.filename)[1].lower().lstrip(".")
    mime_type, _, subtype = image.content_type.lower().partition("/")
    if (
        extension not in ALLOWED_IMAGE_TYPES
        or mime_type != "image"
        or subtype not in ALLOWED_IMAGE_TYPES
    ):
        raise UnsupportedMediaError(IMAGE_TYPE_MESSAGE)
    if image.size > MAX_IMAGE_BYTES:
        raise UnsupportedMediaError(IMAGE_SIZE_MESSAGE)
