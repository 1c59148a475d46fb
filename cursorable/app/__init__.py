"""Application wiring for FastAPI services."""
