"""Core building blocks: database access, pagination, settings and HTTP errors."""
