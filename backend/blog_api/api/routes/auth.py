"""Auth Routes — token introspection under the authentication admission class.

Invariants:
    - Admitted under AdmissionClass.AUTHENTICATION (stricter budget) before
      the token is verified
    - Never issues tokens: issuance belongs to the external auth service
"""

from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials

from blog_api.api.guards import (
    bearer_scheme, get_rate_limiter, get_token_verifier, guard_mutation,
)
from blog_api.config import Settings, get_settings
from blog_api.core.domain_types import AdmissionClass
from blog_api.infrastructure.rate_limiter import AdmissionRateLimiter
from blog_api.infrastructure.token_verifier import TokenVerifier

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/me")
async def whoami(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    limiter: AdmissionRateLimiter = Depends(get_rate_limiter),
    verifier: TokenVerifier = Depends(get_token_verifier),
    settings: Settings = Depends(get_settings),
):
    """Return the identity carried by the presented bearer token."""
    identity = await guard_mutation(
        request, AdmissionClass.AUTHENTICATION, credentials,
        limiter, verifier, settings,
    )
    return {
        "success": True,
        "identity": {"subject": identity.subject, "claims": identity.claims},
    }
