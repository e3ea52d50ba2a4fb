"""
FastAPI application factory and API package.

Run with:
    uvicorn dep_autofill.api:app --reload --port 8000

Or via main.py:
    python -m dep_autofill.main --serve
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dep_autofill.config import get_settings
from dep_autofill.api.routes import dep_router, health_router, sections_router
from dep_autofill.services import RelationGraph, get_section_classifier

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Application factory: create and configure the FastAPI instance."""
    settings = get_settings()

    application = FastAPI(
        title="DEP Autofill API",
        description="Anchor-driven inference for the Data Ethics & Privacy questionnaire",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS: allow the chat frontend (adjust origins in production)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health_router, tags=["Health"])
    application.include_router(dep_router, prefix="/api/dep", tags=["DEP"])
    application.include_router(sections_router, prefix="/api/sections", tags=["Sections"])

    @application.on_event("startup")
    async def startup():
        if settings.validate_relations_on_startup:
            # Raises RelationTableError and aborts startup on a broken table
            RelationGraph(validate=True)
            logger.info("Section relation table verified")
        get_section_classifier().start_periodic_health_check(settings.health_check_interval_seconds)
        logger.info(f"Starting {settings.app_name} API")

    @application.on_event("shutdown")
    async def shutdown():
        get_section_classifier().stop_periodic_health_check()

    return application


# Module-level instance for `uvicorn dep_autofill.api:app`
app = create_app()
