"""API Schemas — Pydantic models for response serialization at the HTTP boundary."""
