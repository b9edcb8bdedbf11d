"""FastAPI application factory."""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import settings
from ..mapping import default_catalogs, default_profiles
from ..pipeline import ConversionPipeline
from ..sheets import ReaderRegistry
from .routes import router

logger = logging.getLogger(__name__)


def build_pipeline(readers: Optional[ReaderRegistry] = None) -> ConversionPipeline:
    """Build the pipeline with the bundled catalogs and profiles."""
    return ConversionPipeline(
        catalogs=default_catalogs(),
        profiles=default_profiles(),
        readers=readers,
        sample_rows=settings.sample_rows,
    )


def create_app(pipeline: Optional[ConversionPipeline] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        pipeline: Pipeline to serve (built from the bundled registries if not provided)
    """
    app = FastAPI(
        title="jpk-convert",
        description="Map accounting system exports onto JPK document fields",
        version=__version__,
    )

    # Registries are built once here and only read afterwards
    app.state.pipeline = pipeline or build_pipeline()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # API routes
    app.include_router(router, prefix="/api")

    logger.info("jpk-convert API ready")
    return app
