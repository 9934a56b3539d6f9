"""Request Guards — rate admission and authentication run before any business logic.

Invariants:
    - Admission ALWAYS precedes authentication: a rate-limited request never
      reaches token verification, validation or the lifecycle manager
    - Each request is admitted under exactly one AdmissionClass
    - Rate limiter and token verifier are process-wide (lru_cache singletons)

Design Decisions:
    - HTTPBearer(auto_error=False): the guard, not FastAPI, decides the 401 body
    - Mutations call guard_mutation() inside the route body, after multipart
      parsing, because the admission class depends on whether an image was sent
"""

import logging
from functools import lru_cache

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from blog_api.config import Settings, get_settings
from blog_api.core.domain_types import AdmissionClass, AuthenticatedIdentity
from blog_api.infrastructure.rate_limiter import (
    AdmissionRateLimiter, limits_from_settings,
)
from blog_api.infrastructure.token_verifier import TokenVerifier

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_rate_limiter() -> AdmissionRateLimiter:
    return AdmissionRateLimiter(limits_from_settings(get_settings()))


@lru_cache
def get_token_verifier() -> TokenVerifier:
    settings = get_settings()
    return TokenVerifier(settings.jwt_secret, settings.jwt_algorithm)


def client_address(request: Request, settings: Settings) -> str:
    """Client network address; first X-Forwarded-For hop when behind a trusted proxy."""
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


async def admit(
    request: Request,
    admission_class: AdmissionClass,
    limiter: AdmissionRateLimiter,
    settings: Settings,
) -> None:
    await limiter.admit(admission_class, client_address(request, settings))


async def guard_read(
    request: Request,
    limiter: AdmissionRateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings),
) -> None:
    """Dependency for unauthenticated reads: general-class admission only."""
    await admit(request, AdmissionClass.GENERAL, limiter, settings)


async def guard_mutation(
    request: Request,
    admission_class: AdmissionClass,
    credentials: HTTPAuthorizationCredentials | None,
    limiter: AdmissionRateLimiter,
    verifier: TokenVerifier,
    settings: Settings,
) -> AuthenticatedIdentity:
    """Admit, then authenticate. Returns the caller identity."""
    await admit(request, admission_class, limiter, settings)
    return verifier.verify(credentials.credentials if credentials else None)
