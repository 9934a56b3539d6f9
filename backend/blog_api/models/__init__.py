"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Post is the only persisted entity

Design Decisions:
    - All models imported here so Base.metadata is complete before
      create_all() or Alembic autogenerate runs
"""

from blog_api.models.post import Post  # noqa: F401
