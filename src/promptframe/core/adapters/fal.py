"""fal.ai provider adapter.

fal.ai hosts the default model (Nano Banana Pro).  It accepts aspect ratio,
resolution, output format and image count directly and generates the whole
batch in one call, returning hosted image URLs.

Request Shape
-------------
    {
        "prompt": "...",
        "aspect_ratio": "16:9",
        "resolution": "2K",
        "output_format": "webp",
        "num_images": 3,
    }

Response Shape
--------------
    {"images": [{"url": "https://...", "content_type": "image/webp"}, ...]}

The request id comes from the queue handle rather than the payload, and is
recorded on the generation for traceability.
"""

from __future__ import annotations

import logging
from typing import Any

import fal_client
from pydantic import BaseModel, ConfigDict, ValidationError

from promptframe.core.config import PromptframeConfig
from promptframe.core.exceptions import EmptyResultError, ProviderError
from promptframe.core.generation_params import GenerationParams
from promptframe.core.provider_adapters import (
    ProviderAdapterBase,
    ProviderResult,
    provider_registry,
)

logger = logging.getLogger(__name__)


class FalImage(BaseModel):
    """A single image entry in a fal.ai response."""

    model_config = ConfigDict(extra="ignore")

    url: str | None = None
    content_type: str | None = None


class FalImageOutput(BaseModel):
    """The part of a fal.ai image generation response we rely on."""

    model_config = ConfigDict(extra="ignore")

    images: list[FalImage] | None = None


@provider_registry.register
class FalAdapter(ProviderAdapterBase):
    """Batched text-to-image generation through fal.ai."""

    name = "fal"
    label = "Fal.ai"
    model_label = "Nano Banana Pro"
    description = "Premium quality and full control over aspect ratio, resolution, and output format."
    credential_env_field = "fal_key_env"
    supports_batch = True

    @classmethod
    def model_id(cls, config: PromptframeConfig) -> str:
        return config.fal_model_id

    def build_arguments(self, params: GenerationParams) -> dict[str, Any]:
        """Map normalised params to fal.ai request arguments."""
        return {
            "prompt": params.prompt,
            "aspect_ratio": params.aspect_ratio,
            "resolution": params.resolution,
            "output_format": params.output_format,
            "num_images": params.num_images,
        }

    def generate(self, params: GenerationParams) -> ProviderResult:
        fal_key = self.require_credential()
        client = fal_client.SyncClient(key=fal_key)

        application = self.model_id(self.config)
        logger.info(
            "Submitting fal.ai request to %s (%d image(s), %s, %s)",
            application,
            params.num_images,
            params.aspect_ratio,
            params.resolution,
        )
        handle = client.submit(application, arguments=self.build_arguments(params))
        payload = handle.get()

        image_urls = self.extract_image_urls(payload)
        if not image_urls:
            raise EmptyResultError("fal.ai returned no images.")

        request_id = getattr(handle, "request_id", None) or None
        return ProviderResult(image_urls=image_urls, request_id=request_id)

    @staticmethod
    def extract_image_urls(payload: Any) -> list[str]:
        """Return the non-empty image URLs from a fal.ai response payload.

        Raises:
            ProviderError: If the payload does not have the expected shape.
        """
        try:
            output = FalImageOutput.model_validate(payload or {})
        except ValidationError as e:
            raise ProviderError(f"Malformed fal.ai response: {e}") from e

        return [image.url for image in output.images or [] if image.url]
