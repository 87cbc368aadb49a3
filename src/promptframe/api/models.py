"""Pydantic request and response models for the Promptframe API.

These models define the JSON schema for every API endpoint.  FastAPI uses
them for automatic request validation, serialisation, and OpenAPI
documentation generation.

Enum-like request fields (provider, aspect ratio, resolution, output format)
are deliberately typed as plain strings: unknown values are normalised to
defaults by the orchestrator instead of being rejected here.

Models
------
GenerateRequest
    Payload for ``POST /api/generate``.
GenerateResponse
    Successful result of ``POST /api/generate``.
GenerationRecord
    One persisted generation, as returned by the listing endpoints.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class GenerateRequest(BaseModel):
    """Request body for the ``POST /api/generate`` endpoint.

    Attributes:
        prompt: Text description of the image.  Surrounding whitespace is
            removed; a blank prompt is rejected.
        aspect_ratio: One of ``1:1``, ``4:3``, ``3:2``, ``16:9``, ``9:16``.
            Anything else falls back to ``1:1``.
        resolution: One of ``1K``, ``2K``, ``4K``.  Forced to ``1K`` for
            HuggingFace.
        output_format: One of ``png``, ``jpeg``, ``webp``.  Forced to ``png``
            for HuggingFace.
        num_images: Number of images.  Fractions are truncated, then the
            count is clamped into 1–4.  ``None`` means 1.
        provider: ``fal`` or ``huggingface``.  Anything else means ``fal``.
    """

    prompt: str = Field(
        ...,
        description="Text description of the image to generate.",
    )
    aspect_ratio: str = Field(
        ...,
        description="Aspect ratio (e.g. '1:1', '16:9').",
    )
    resolution: str = Field(
        ...,
        description="Resolution: '1K', '2K' or '4K'.",
    )
    output_format: str = Field(
        ...,
        description="Output format: 'png', 'jpeg' or 'webp'.",
    )
    num_images: int | float | None = Field(
        default=None,
        description="Number of images (truncated and clamped to 1–4).",
    )
    provider: str | None = Field(
        default=None,
        description="Image provider: 'fal' (default) or 'huggingface'.",
    )

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Describe the image you want to create.")
        return value


class GenerateResponse(BaseModel):
    """Response body for a successful ``POST /api/generate``.

    Attributes:
        id: Id of the persisted generation record.
        image_urls: Generated image URLs, in generation order.
        request_id: Provider request id (fal.ai only).
    """

    id: str
    image_urls: list[str]
    request_id: str | None = None


class GenerationRecord(BaseModel):
    """A persisted generation request and its lifecycle state."""

    id: str
    prompt: str
    model: str
    provider: str
    aspect_ratio: str
    resolution: str
    output_format: str
    num_images: int
    status: Literal["queued", "complete", "failed"]
    image_urls: list[str] | None = None
    request_id: str | None = None
    error: str | None = None
    created_at: float
    updated_at: float
