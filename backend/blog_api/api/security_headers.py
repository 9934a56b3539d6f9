"""Security Headers — response headers applied to every API response.

Invariants:
    - img-src admits the asset store's public origin, so post images render
      on pages that embed API-served content
    - Cross-Origin-Embedder-Policy is never sent (images are cross-origin)
    - The interactive docs page is exempt from the CSP: Swagger UI loads its
      script and stylesheet from a CDN
"""

from urllib.parse import urlparse

DOCS_PATHS = ("/api-docs", "/openapi.json")


def _origin(url: str) -> str | None:
    parts = urlparse(url)
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}"


def content_security_policy(asset_public_base_url: str) -> str:
    img_src = ["'self'", "data:"]
    asset_origin = _origin(asset_public_base_url)
    if asset_origin:
        img_src.append(asset_origin)
    directives = {
        "default-src": ["'self'"],
        "base-uri": ["'self'"],
        "font-src": ["'self'", "https:", "data:"],
        "form-action": ["'self'"],
        "frame-ancestors": ["'self'"],
        "img-src": img_src,
        "object-src": ["'none'"],
        "script-src": ["'self'"],
        "script-src-attr": ["'none'"],
        "style-src": ["'self'", "'unsafe-inline'"],
    }
    policy = "; ".join(f"{name} {' '.join(values)}" for name, values in directives.items())
    return policy + "; upgrade-insecure-requests"


def build_security_headers(asset_public_base_url: str) -> dict[str, str]:
    return {
        "Content-Security-Policy": content_security_policy(asset_public_base_url),
        "Cross-Origin-Opener-Policy": "same-origin",
        "Cross-Origin-Resource-Policy": "same-origin",
        "Referrer-Policy": "no-referrer",
        "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
        "X-Content-Type-Options": "nosniff",
        "X-DNS-Prefetch-Control": "off",
        "X-Frame-Options": "SAMEORIGIN",
        "X-Permitted-Cross-Domain-Policies": "none",
        "X-XSS-Protection": "0",
    }


def apply_security_headers(path: str, headers, security_headers: dict[str, str]) -> None:
    """Set every security header on a response's headers, honouring the docs exemption."""
    for name, value in security_headers.items():
        if name == "Content-Security-Policy" and path.startswith(DOCS_PATHS):
            continue
        headers[name] = value
