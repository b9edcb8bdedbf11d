"""HTTP API for jpk-convert."""

from .app import build_pipeline, create_app

__all__ = ["build_pipeline", "create_app"]
