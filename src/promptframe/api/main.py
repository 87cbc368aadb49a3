"""Promptframe — FastAPI Application.

This module defines the FastAPI ``app`` instance, all REST API routes, and
the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Generation** is delegated to
  :class:`~promptframe.core.orchestrator.GenerationOrchestrator`, created at
  startup and stored on ``app.state``.
- **Records** live in a SQLite database; the gallery listing reads them
  newest first.
- **Stored images** (HuggingFace output) are served from the blob
  directory by FastAPI's ``StaticFiles``.

Endpoints
---------
========  ============================  ====================================
Method    Path                          Purpose
========  ============================  ====================================
GET       ``/api/config``               Providers and option lists
POST      ``/api/generate``             Generate images for a prompt
GET       ``/api/images``               Most recent generation records
GET       ``/api/images/{id}``          Single generation record
GET       ``/api/stats``                Record counts by status/provider
========  ============================  ====================================

Usage
-----
CLI (installed entry point)::

    promptframe

Direct invocation::

    python -m promptframe.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from promptframe import __version__
from promptframe.api.models import GenerateRequest, GenerateResponse, GenerationRecord
from promptframe.core.config import PromptframeConfig, config
from promptframe.core.exceptions import (
    ConfigurationError,
    GenerationFailed,
    RecordNotFoundError,
)
from promptframe.core.generation_params import (
    ASPECT_RATIOS,
    DEFAULT_PROVIDER,
    OUTPUT_FORMATS,
    RESOLUTIONS,
)
from promptframe.core.orchestrator import GenerationOrchestrator
from promptframe.core.provider_adapters import provider_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _orchestrator(request: Request) -> GenerationOrchestrator:
    return request.app.state.orchestrator


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@router.get("/config")
async def get_config(request: Request) -> dict:
    """Return the option catalogue for the frontend.

    Returns:
        Dictionary with ``version``, ``providers`` (id, label, model,
        description and forced overrides), ``default_provider``,
        ``aspect_ratios``, ``resolutions``, ``output_formats``,
        ``max_images`` and ``default_list_limit``.
    """
    app_config: PromptframeConfig = request.app.state.config
    providers = [
        provider_registry.get_adapter_class(name).get_provider_info(app_config)
        for name in provider_registry.list_available()
    ]
    return {
        "version": __version__,
        "providers": providers,
        "default_provider": DEFAULT_PROVIDER,
        "aspect_ratios": list(ASPECT_RATIOS),
        "resolutions": list(RESOLUTIONS),
        "output_formats": list(OUTPUT_FORMATS),
        "max_images": app_config.max_images,
        "default_list_limit": app_config.default_list_limit,
    }


@router.post("/generate", response_model=GenerateResponse)
def generate_images(req: GenerateRequest, request: Request) -> GenerateResponse:
    """Generate images for a prompt and persist the generation record.

    The record is visible as ``queued`` while the provider runs.  A failed
    generation is still persisted (status ``failed``) before the error is
    returned.

    Declared as a plain ``def`` so FastAPI runs the blocking provider calls
    in its thread pool.

    Raises:
        HTTPException: 500 when a provider credential is missing, 502 for
            any provider failure.  ``detail`` holds the error ``message``
            and the record ``id``.
    """
    try:
        outcome = _orchestrator(request).generate(
            req.prompt,
            aspect_ratio=req.aspect_ratio,
            resolution=req.resolution,
            output_format=req.output_format,
            num_images=req.num_images,
            provider=req.provider,
        )
    except GenerationFailed as e:
        status_code = 500 if isinstance(e.cause, ConfigurationError) else 502
        raise HTTPException(
            status_code=status_code,
            detail={"message": str(e), "id": e.record_id},
        ) from e

    return GenerateResponse(
        id=outcome.id,
        image_urls=outcome.image_urls,
        request_id=outcome.request_id,
    )


@router.get("/images", response_model=list[GenerationRecord])
async def list_images(
    request: Request,
    limit: int | None = Query(default=None, ge=1),
) -> list[dict]:
    """Return the most recent generation records, newest first.

    Args:
        limit: Maximum number of records (defaults to
            ``default_list_limit``, 24).
    """
    return _orchestrator(request).list_recent(limit)


@router.get("/images/{record_id}", response_model=GenerationRecord)
async def get_image(record_id: str, request: Request) -> dict:
    """Return a single generation record.

    Raises:
        HTTPException: 404 if the record is not found.
    """
    try:
        return _orchestrator(request).get_record(record_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.get("/stats")
async def get_stats(request: Request) -> dict:
    """Return generation counts.

    Returns:
        Dictionary with ``total``, ``by_status`` and ``by_provider``.
    """
    return _orchestrator(request).stats()


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(app_config: PromptframeConfig = config) -> FastAPI:
    """Build the FastAPI application for *app_config*.

    Args:
        app_config: Configuration providing paths, provider models and
            listing defaults.

    Returns:
        Configured FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.orchestrator = GenerationOrchestrator.from_config(app_config)
        logger.info("GenerationOrchestrator initialised (db=%s).", app_config.database_path)
        yield

    app = FastAPI(
        title="Promptframe",
        description="Prompt-to-image generation with a persisted gallery.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = app_config

    # Allow cross-origin requests so the frontend can be served from a
    # different port during development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    # Stored blobs are served at the same prefix the blob store uses to
    # build their URLs.
    app.mount(
        app_config.blob_url_prefix,
        StaticFiles(directory=str(app_config.blob_dir)),
        name="blobs",
    )
    return app


app = create_app(config)


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from
    :data:`~promptframe.core.config.config` (``PROMPTFRAME_SERVER_HOST``,
    ``PROMPTFRAME_SERVER_PORT``, ``PROMPTFRAME_LOG_LEVEL``).

    This function is registered as the ``promptframe`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "promptframe.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
