"""Core functionality for prompt-to-image generation.

This package holds everything below the HTTP layer:

- **Configuration** (config.py): Pydantic Settings, ``PROMPTFRAME_`` prefix
- **Input normalisation** (generation_params.py): total functions from raw
  form fields to closed value sets, plus HuggingFace dimension resolution
- **Provider adapters** (provider_adapters.py, adapters/): one adapter per
  external image provider, discovered through ``provider_registry``
- **Persistence** (record_store.py, blob_store.py): SQLite generation
  records and file-backed image blobs
- **Orchestration** (orchestrator.py): the queued -> complete | failed
  record lifecycle and the recent-records listing

Usage Example
-------------
    from promptframe.core import GenerationOrchestrator, config

    orchestrator = GenerationOrchestrator.from_config(config)
    outcome = orchestrator.generate("a red fox in snow", provider="huggingface")
"""

# Import adapters to ensure they're registered
from promptframe.core.adapters import FalAdapter, HuggingFaceAdapter  # noqa: F401
from promptframe.core.config import PromptframeConfig, config
from promptframe.core.exceptions import GenerationFailed
from promptframe.core.orchestrator import GenerationOrchestrator
from promptframe.core.provider_adapters import ProviderAdapterBase, provider_registry

__all__ = [
    "GenerationFailed",
    "GenerationOrchestrator",
    "ProviderAdapterBase",
    "provider_registry",
    "PromptframeConfig",
    "config",
]
