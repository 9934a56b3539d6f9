"""Token Verifier — turns a presented bearer credential into an authenticated identity.

Invariants:
    - Missing credential, bad signature, expiry and a missing "sub" claim all
      raise UnauthenticatedError; nothing else escapes
    - No role checks: any valid identity may mutate any post

Design Decisions:
    - Verification only: tokens are issued by a separate auth service sharing the secret
"""

import jwt

from blog_api.core.domain_types import AuthenticatedIdentity
from blog_api.core.errors import UnauthenticatedError


class TokenVerifier:
    """Verifies HS256 (or configured algorithm) JWTs."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    def verify(self, credential: str | None) -> AuthenticatedIdentity:
        if not credential:
            raise UnauthenticatedError("No token, authorization denied")
        try:
            claims = jwt.decode(
                credential, self.secret, algorithms=[self.algorithm],
                options={"require": ["sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise UnauthenticatedError("Token expired")
        except jwt.InvalidTokenError:
            raise UnauthenticatedError("Invalid token")
        return AuthenticatedIdentity(subject=str(claims["sub"]), claims=claims)
