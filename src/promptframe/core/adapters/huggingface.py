"""HuggingFace inference provider adapter.

The free HuggingFace inference tier serves SDXL-Lightning, which has no
batch parameter and returns one raw image per call.  This adapter therefore:

- ignores the caller's resolution and output format (always ``1K``/``png``)
- derives pixel dimensions from the aspect ratio, see
  :func:`promptframe.core.generation_params.resolve_dimensions`
- issues one call per requested image, one after another
- stores each image in the blob store and collects its URL

An image whose URL cannot be resolved is dropped from the result.  Only an
empty aggregate result fails the request.
"""

from __future__ import annotations

import io
import logging

from huggingface_hub import InferenceClient
from PIL import Image

from promptframe.core.config import PromptframeConfig
from promptframe.core.exceptions import ConfigurationError, EmptyResultError
from promptframe.core.generation_params import GenerationParams, resolve_dimensions
from promptframe.core.provider_adapters import (
    ProviderAdapterBase,
    ProviderResult,
    provider_registry,
)

logger = logging.getLogger(__name__)


@provider_registry.register
class HuggingFaceAdapter(ProviderAdapterBase):
    """Sequential per-image text-to-image generation through HuggingFace."""

    name = "huggingface"
    label = "Hugging Face"
    model_label = "SDXL Lightning"
    description = "Free API tier; outputs 1024px PNG images for quick experiments."
    credential_env_field = "hf_token_env"
    supports_batch = False
    forced_resolution = "1K"
    forced_output_format = "png"

    @classmethod
    def model_id(cls, config: PromptframeConfig) -> str:
        return config.hf_model_id

    def dimensions(self, params: GenerationParams) -> tuple[int, int]:
        """Return ``(width, height)`` for the request's aspect ratio."""
        return resolve_dimensions(
            params.aspect_ratio,
            base_size=self.config.hf_base_size,
            multiple=self.config.dimension_multiple,
        )

    def generate(self, params: GenerationParams) -> ProviderResult:
        hf_token = self.require_credential()
        if self.blob_store is None:
            raise ConfigurationError("HuggingFace provider requires a blob store.")

        width, height = self.dimensions(params)
        model = self.model_id(self.config)
        client = InferenceClient(token=hf_token)

        image_urls: list[str] = []
        for index in range(params.num_images):
            logger.info(
                "Requesting HuggingFace image %d/%d from %s (%dx%d)",
                index + 1,
                params.num_images,
                model,
                width,
                height,
            )
            image = client.text_to_image(
                params.prompt,
                model=model,
                width=width,
                height=height,
            )

            storage_id = self.blob_store.store(self._encode_png(image), suffix=".png")
            url = self.blob_store.get_url(storage_id)

            if url:
                image_urls.append(url)
            else:
                logger.warning(f"No URL for stored blob {storage_id}; dropping image")

        if not image_urls:
            raise EmptyResultError("Hugging Face returned no images.")

        return ProviderResult(image_urls=image_urls)

    @staticmethod
    def _encode_png(image: Image.Image) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()
