"""API layer - REST endpoints."""

from videotube.api.main import app, create_app

__all__ = [
    "app",
    "create_app",
]
