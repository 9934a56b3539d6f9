"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure imports only core types, errors and pure validators
    - Every external failure is mapped to a BlogApiError subclass or, for
      best-effort cleanup, logged and swallowed

Design Decisions:
    - Process-wide handles (db_manager, asset store, rate limiter) are created
      once and reused across requests
"""
