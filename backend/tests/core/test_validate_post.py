"""Post Validation — tests for the pure list/create/update/id/media validators.

Tests cover:
    - heading bounds (2 rejected, 3 accepted, 200 accepted, 201 rejected) after trimming
    - description bound (9 rejected, 10 accepted)
    - required-field messages on create, optional fields on update
    - page/limit/search/sort parsing and defaults
    - id syntax
    - image extension, MIME type and size constraints
"""

from uuid import uuid4

import pytest

from blog_api.core.domain_types import ImageUpload, SortField
from blog_api.core.errors import UnsupportedMediaError
from blog_api.core.validate_post import (
    DESCRIPTION_LENGTH_MESSAGE,
    HEADING_LENGTH_MESSAGE,
    INVALID_ID_MESSAGE,
    MAX_IMAGE_BYTES,
    MAX_OFFSET,
    check_image_upload,
    validate_create,
    validate_list_query,
    validate_post_id,
    validate_update,
)


# ─── validate_create ─────────────────────────────────────────────

def test_create_rejects_two_char_heading():
    _, errors = validate_create("ab", "0123456789")
    assert errors == {"heading": [HEADING_LENGTH_MESSAGE]}


def test_create_accepts_three_char_heading():
    fields, errors = validate_create("abc", "0123456789")
    assert errors == {}
    assert fields.heading == "abc"


def test_create_accepts_ten_char_description():
    fields, errors = validate_create("abc", "0123456789")
    assert errors == {}
    assert fields.description == "0123456789"


def test_create_rejects_nine_char_description():
    _, errors = validate_create("abc", "012345678")
    assert errors == {"description": [DESCRIPTION_LENGTH_MESSAGE]}


def test_create_heading_upper_bound():
    _, ok = validate_create("h" * 200, "0123456789")
    _, too_long = validate_create("h" * 201, "0123456789")
    assert ok == {}
    assert too_long == {"heading": [HEADING_LENGTH_MESSAGE]}


def test_create_trims_before_measuring():
    fields, errors = validate_create("  abc  ", "\n0123456789\t")
    assert errors == {}
    assert fields.heading == "abc"
    assert fields.description == "0123456789"


def test_create_padding_does_not_count_toward_length():
    _, errors = validate_create("  ab  ", "   012345678   ")
    assert set(errors) == {"heading", "description"}


def test_create_missing_fields_report_required_first():
    _, errors = validate_create(None, None)
    assert errors == {
        "heading": ["Heading is required"],
        "description": ["Description is required"],
    }


def test_create_whitespace_only_heading_reports_every_violation_in_order():
    _, errors = validate_create("   ", "0123456789")
    assert errors["heading"] == ["Heading is required", HEADING_LENGTH_MESSAGE]


# ─── validate_update ─────────────────────────────────────────────

def test_update_with_no_fields_is_valid():
    post_id, fields, errors = validate_update(str(uuid4()), None, None)
    assert errors == {}
    assert post_id is not None
    assert fields.is_empty()


def test_update_empty_strings_count_as_omitted():
    _, fields, errors = validate_update(str(uuid4()), "", "")
    assert errors == {}
    assert fields.heading is None
    assert fields.description is None


def test_update_applies_creation_bounds_when_present():
    _, _, errors = validate_update(str(uuid4()), "ab", "short")
    assert errors == {
        "heading": [HEADING_LENGTH_MESSAGE],
        "description": [DESCRIPTION_LENGTH_MESSAGE],
    }


def test_update_rejects_invalid_id_alongside_field_errors():
    post_id, _, errors = validate_update("not-a-uuid", "ab", None)
    assert post_id is None
    assert errors == {
        "id": [INVALID_ID_MESSAGE],
        "heading": [HEADING_LENGTH_MESSAGE],
    }


# ─── validate_post_id ────────────────────────────────────────────

def test_post_id_accepts_uuid():
    uid = uuid4()
    post_id, errors = validate_post_id(str(uid))
    assert errors == {}
    assert post_id == uid


@pytest.mark.parametrize("raw", ["", "123", "64b7f0c2e4b0a1a2b3c4d5e6", "zzzz"])
def test_post_id_rejects_malformed(raw):
    post_id, errors = validate_post_id(raw)
    assert post_id is None
    assert errors == {"id": [INVALID_ID_MESSAGE]}


# ─── validate_list_query ─────────────────────────────────────────

def test_list_defaults():
    query, errors = validate_list_query()
    assert errors == {}
    assert query.page == 1
    assert query.limit == 10
    assert query.search is None
    assert query.sort_field == SortField.CREATED_AT
    assert query.descending is True
    assert query.skip == 0


def test_list_skip_is_page_minus_one_times_limit():
    query, _ = validate_list_query(page="3", limit="20")
    assert query.skip == 40


@pytest.mark.parametrize("page", ["0", "-1", "abc", "1.5"])
def test_list_rejects_bad_page(page):
    query, errors = validate_list_query(page=page)
    assert query is None
    assert errors == {"page": ["Page must be a positive integer"]}


@pytest.mark.parametrize("limit", ["0", "101", "ten"])
def test_list_rejects_bad_limit(limit):
    _, errors = validate_list_query(limit=limit)
    assert errors == {"limit": ["Limit must be between 1 and 100"]}


def test_list_rejects_page_whose_offset_overflows():
    _, errors = validate_list_query(page="10000000000000000000")
    assert errors == {"page": ["Page must be a positive integer"]}


def test_list_page_offset_bound_depends_on_limit():
    last_page = MAX_OFFSET // 100 + 1
    assert validate_list_query(page=str(last_page), limit="100")[1] == {}
    _, errors = validate_list_query(page=str(last_page + 1), limit="100")
    assert "page" in errors


def test_list_accepts_limit_bounds():
    assert validate_list_query(limit="1")[1] == {}
    assert validate_list_query(limit="100")[1] == {}


def test_list_search_is_trimmed_and_bounded():
    query, errors = validate_list_query(search="  hello  ")
    assert errors == {}
    assert query.search == "hello"
    _, errors = validate_list_query(search="x" * 101)
    assert errors == {"search": ["Search query too long"]}


def test_list_blank_search_means_no_search():
    query, _ = validate_list_query(search="   ")
    assert query.search is None


def test_list_sort_parses_direction():
    query, _ = validate_list_query(sort="heading")
    assert query.sort_field == SortField.HEADING
    assert query.descending is False
    query, _ = validate_list_query(sort="-updatedAt")
    assert query.sort_field == SortField.UPDATED_AT
    assert query.descending is True


def test_list_rejects_unknown_sort_field():
    _, errors = validate_list_query(sort="-password")
    assert errors == {"sort": ["Invalid sort field"]}


def test_list_collects_all_violations():
    _, errors = validate_list_query(page="0", limit="500", sort="nope")
    assert set(errors) == {"page", "limit", "sort"}


# ─── check_image_upload ──────────────────────────────────────────

@pytest.mark.parametrize("filename,content_type", [
    ("a.jpg", "image/jpeg"),
    ("a.JPEG", "image/jpeg"),
    ("a.png", "image/png"),
    ("a.gif", "image/gif"),
    ("a.webp", "image/webp"),
])
def test_image_allowed_types(filename, content_type):
    check_image_upload(ImageUpload(filename, content_type, b"x"))


@pytest.mark.parametrize("filename,content_type", [
    ("a.pdf", "application/pdf"),
    ("a.png", "application/octet-stream"),
    ("a.exe", "image/png"),
    ("noext", "image/png"),
    ("a.svg", "image/svg+xml"),
])
def test_image_rejects_disallowed_types(filename, content_type):
    with pytest.raises(UnsupportedMediaError):
        check_image_upload(ImageUpload(filename, content_type, b"x"))


def test_image_size_limit_is_five_megabytes():
    check_image_upload(ImageUpload("a.png", "image/png", b"x" * MAX_IMAGE_BYTES))
    with pytest.raises(UnsupportedMediaError) as exc:
        check_image_upload(
            ImageUpload("a.png", "image/png", b"x" * (MAX_IMAGE_BYTES + 1)),
        )
    assert exc.value.http_status == 400
