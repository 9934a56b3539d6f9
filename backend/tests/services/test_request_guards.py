"""Request Guards — rate admission precedes authentication on every route.

Invariants:
    - Over-budget requests get 429 with Retry-After, whatever their credentials
    - Requests with an image consume the upload budget, others the general one
    - X-Forwarded-For identifies the client only when explicitly trusted
"""

import pytest
from limits import parse

from blog_api.api.guards import get_rate_limiter
from blog_api.config import Settings, get_settings
from blog_api.core.domain_types import AdmissionClass
from blog_api.infrastructure.rate_limiter import (
    ADMISSION_MESSAGES, AdmissionRateLimiter,
)
from blog_api.main import app
from tests.services.fakes import auth_headers, make_png_bytes


@pytest.fixture
def tight_limiter(client):
    limiter = AdmissionRateLimiter({cls: parse("2/minute") for cls in AdmissionClass})
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    return limiter


async def test_general_budget_exhausted(client, tight_limiter):
    for _ in range(2):
        assert (await client.get("/api/posts")).status_code == 200

    res = await client.get("/api/posts")

    assert res.status_code == 429
    body = res.json()
    assert body["code"] == "RATE_LIMITED"
    assert body["message"] == ADMISSION_MESSAGES[AdmissionClass.GENERAL]
    assert int(res.headers["retry-after"]) >= 1


async def test_rate_limit_precedes_authentication(client, tight_limiter):
    for _ in range(2):
        await client.get("/api/posts")

    res = await client.post("/api/posts", data={"heading": "No token here"})

    assert res.status_code == 429


async def test_image_requests_use_upload_budget(client, tight_limiter):
    files = {"image": ("photo.png", make_png_bytes(), "image/png")}
    for i in range(2):
        res = await client.post(
            "/api/posts",
            data={"heading": f"Heading {i}", "description": "Description long enough"},
            files=files,
            headers=auth_headers(),
        )
        assert res.status_code == 201

    res = await client.post(
        "/api/posts",
        data={"heading": "Third", "description": "Description long enough"},
        files=files,
        headers=auth_headers(),
    )
    assert res.status_code == 429
    assert res.json()["message"] == ADMISSION_MESSAGES[AdmissionClass.UPLOAD]

    assert (await client.get("/api/posts")).status_code == 200


async def test_forwarded_for_ignored_by_default(client, tight_limiter):
    for hop in ("10.0.0.1", "10.0.0.2"):
        await client.get("/api/posts", headers={"X-Forwarded-For": hop})

    res = await client.get("/api/posts", headers={"X-Forwarded-For": "10.0.0.3"})
    assert res.status_code == 429


async def test_forwarded_for_trusted_behind_proxy(client, tight_limiter):
    app.dependency_overrides[get_settings] = lambda: Settings(trust_forwarded_for=True)
    for _ in range(2):
        await client.get("/api/posts", headers={"X-Forwarded-For": "10.0.0.1, 172.16.0.1"})

    blocked = await client.get("/api/posts", headers={"X-Forwarded-For": "10.0.0.1"})
    other = await client.get("/api/posts", headers={"X-Forwarded-For": "10.0.0.2"})

    assert blocked.status_code == 429
    assert other.status_code == 200


# ─── auth introspection ──────────────────────────────────────────

async def test_whoami(client):
    res = await client.get("/api/auth/me", headers=auth_headers())
    assert res.status_code == 200
    assert res.json()["identity"]["subject"] == "author-1"


async def test_whoami_rejects_garbage_token(client):
    res = await client.get("/api/auth/me", headers=auth_headers("not.a.jwt"))
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid token"


async def test_whoami_uses_authentication_budget(client, tight_limiter):
    for _ in range(2):
        await client.get("/api/auth/me")

    res = await client.get("/api/auth/me", headers=auth_headers())
    assert res.status_code == 429
    assert res.json()["message"] == ADMISSION_MESSAGES[AdmissionClass.AUTHENTICATION]
