# services/drills/__init__.py
"""drills service package initializer — explicit exports only; no runtime side effects."""

__all__ = ["app", "models", "repo", "routes", "scorer", "seed", "validation"]
