"""Generation lifecycle orchestration.

:class:`GenerationOrchestrator` drives one generation request from form
fields to a terminal record state:

1. Normalise inputs (image count, provider, enum-like fields, provider
   overrides).
2. Insert a ``queued`` record so the gallery can show a placeholder
   immediately.
3. Run the selected provider adapter.
4. Patch the record to ``complete`` with the image URLs, or to ``failed``
   with a human-readable error, and re-raise in the failure case.

Exactly one terminal patch is issued per record.  The patch is guarded on
the record still being ``queued``, so a record can never transition twice.

If the process dies between steps 2 and 4 the record stays ``queued``.
Sweeping such records is left to an external job.

Usage
-----
::

    from promptframe.core.config import config
    from promptframe.core.orchestrator import GenerationOrchestrator

    orchestrator = GenerationOrchestrator.from_config(config)
    outcome = orchestrator.generate("a lighthouse at dusk", aspect_ratio="16:9")
    recent = orchestrator.list_recent(limit=10)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .blob_store import LocalBlobStore
from .config import PromptframeConfig
from .exceptions import EmptyResultError, GenerationFailed
from .generation_params import GenerationParams, normalize_params
from .provider_adapters import ProviderRegistry, ProviderResult, provider_registry
from .record_store import GenerationStore

logger = logging.getLogger(__name__)

STATUS_QUEUED = "queued"
STATUS_COMPLETE = "complete"
STATUS_FAILED = "failed"

UNEXPECTED_ERROR_MESSAGE = "Unexpected image generation error."


@dataclass
class GenerationOutcome:
    """Successful result of :meth:`GenerationOrchestrator.generate`."""

    id: str
    image_urls: list[str]
    request_id: str | None = None


def describe_error(error: BaseException) -> str:
    """Return the message stored on a failed record for *error*."""
    message = str(error).strip()
    return message or UNEXPECTED_ERROR_MESSAGE


class GenerationOrchestrator:
    """Create, run, and reconcile generation records.

    Attributes:
        config: Application configuration.
        store: Record store; the orchestrator is its only writer.
        blob_store: Blob store passed to adapters that need one.
        registry: Provider registry used to resolve adapters.
    """

    def __init__(
        self,
        config: PromptframeConfig,
        store: GenerationStore,
        blob_store: LocalBlobStore,
        registry: ProviderRegistry = provider_registry,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.store = store
        self.blob_store = blob_store
        self.registry = registry
        self._clock = clock

    @classmethod
    def from_config(cls, config: PromptframeConfig) -> GenerationOrchestrator:
        """Build an orchestrator with stores located from *config*."""
        return cls(
            config=config,
            store=GenerationStore(config.database_path),
            blob_store=LocalBlobStore(config.blob_dir, config.blob_url_prefix),
        )

    # -- Inbound operations -------------------------------------------------

    def generate(
        self,
        prompt: str,
        aspect_ratio: str | None = None,
        resolution: str | None = None,
        output_format: str | None = None,
        num_images: int | float | None = None,
        provider: str | None = None,
    ) -> GenerationOutcome:
        """Run one generation request through its full lifecycle.

        Returns:
            The record id, image URLs and optional provider request id.

        Raises:
            GenerationFailed: If the provider call or the completion patch
                fails for any reason.  The record has already been patched
                to ``failed`` by then.
        """
        params = self.resolve_params(
            normalize_params(
                prompt,
                aspect_ratio=aspect_ratio,
                resolution=resolution,
                output_format=output_format,
                num_images=num_images,
                provider=provider,
                max_images=self.config.max_images,
            )
        )
        record_id = self._create_record(params)

        try:
            adapter = self.registry.instantiate(params.provider, self.config, self.blob_store)
            result = adapter.generate(params)
            if not result.image_urls:
                raise EmptyResultError(f"{adapter.label} returned no images.")
            self._complete_record(record_id, result)
        except Exception as e:
            message = describe_error(e)
            logger.exception("Generation %s failed: %s", record_id, message)
            self._fail_record(record_id, message)
            raise GenerationFailed(record_id, e, message) from e

        return GenerationOutcome(
            id=record_id,
            image_urls=list(result.image_urls),
            request_id=result.request_id,
        )

    def list_recent(self, limit: int | None = None) -> list[dict[str, Any]]:
        """Return the most recent records, newest first.

        Args:
            limit: Maximum number of records; defaults to
                ``config.default_list_limit``.
        """
        if limit is None:
            limit = self.config.default_list_limit
        return self.store.query_by_created_at_desc(limit)

    def get_record(self, record_id: str) -> dict[str, Any]:
        """Return a single record by id."""
        return self.store.get(record_id)

    def stats(self) -> dict[str, Any]:
        """Return record counts grouped by status and by provider."""
        by_status = self.store.count_by("status")
        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "by_provider": self.store.count_by("provider"),
        }

    # -- Lifecycle steps ----------------------------------------------------

    def resolve_params(self, params: GenerationParams) -> GenerationParams:
        """Apply the selected provider's forced overrides."""
        adapter_class = self.registry.get_adapter_class(params.provider)
        return adapter_class.resolve_params(params)

    def _create_record(self, params: GenerationParams) -> str:
        adapter_class = self.registry.get_adapter_class(params.provider)
        now = self._clock()
        record_id = self.store.insert(
            {
                "prompt": params.prompt,
                "model": adapter_class.model_id(self.config),
                "provider": params.provider,
                "aspect_ratio": params.aspect_ratio,
                "resolution": params.resolution,
                "output_format": params.output_format,
                "num_images": params.num_images,
                "status": STATUS_QUEUED,
                "created_at": now,
                "updated_at": now,
            }
        )
        logger.info(
            "Queued generation %s (provider=%s, images=%d)",
            record_id,
            params.provider,
            params.num_images,
        )
        return record_id

    def _complete_record(self, record_id: str, result: ProviderResult) -> None:
        fields: dict[str, Any] = {
            "status": STATUS_COMPLETE,
            "image_urls": list(result.image_urls),
            "updated_at": self._clock(),
        }
        if result.request_id:
            fields["request_id"] = result.request_id

        self.store.patch(record_id, fields, expected_status=STATUS_QUEUED)
        logger.info("Completed generation %s with %d image(s)", record_id, len(result.image_urls))

    def _fail_record(self, record_id: str, message: str) -> None:
        self.store.patch(
            record_id,
            {
                "status": STATUS_FAILED,
                "error": message,
                "updated_at": self._clock(),
            },
            expected_status=STATUS_QUEUED,
        )
