"""Promptframe - prompt-to-image generation service with a persisted gallery."""

__version__ = "0.1.0"

from promptframe.core.config import PromptframeConfig, config
from promptframe.core.provider_adapters import ProviderAdapterBase, provider_registry

__all__ = [
    "ProviderAdapterBase",
    "provider_registry",
    "PromptframeConfig",
    "config",
]
