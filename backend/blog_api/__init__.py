"""Blog API — post CRUD with token-gated authorship, image assets and rate admission."""

__version__ = "1.0.0"
