"""API Layer — FastAPI routes, request guards and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return JSON with a boolean `success` field

Design Decisions:
    - Thin routes delegate to services/post_lifecycle.py
"""
