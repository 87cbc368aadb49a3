"""Base classes and registry for image provider adapters.

Each external image provider (fal.ai, HuggingFace inference, ...) has an
adapter that turns a normalised :class:`GenerationParams` into the
provider's call shape and turns the provider's output back into a
:class:`ProviderResult`: an ordered list of image URLs plus an optional
provider request id.

Provider Adapter Pattern
------------------------
Adapters encapsulate:
- The credential they need, read from the environment at call time
- Forced parameter overrides (e.g. fixed resolution/format)
- Provider-specific call parameters (batched vs one call per image)
- Normalisation of heterogeneous provider outputs

Usage Example
-------------
    >>> from promptframe.core.provider_adapters import provider_registry
    >>> from promptframe.core.config import config
    >>>
    >>> provider_registry.list_available()
    ['fal', 'huggingface']
    >>> adapter = provider_registry.instantiate("fal", config)
    >>> result = adapter.generate(params)
    >>> result.image_urls
    ['https://...']

See Also
--------
- promptframe.core.adapters.fal: fal.ai adapter
- promptframe.core.adapters.huggingface: HuggingFace inference adapter
- promptframe.core.orchestrator: drives adapters through the record lifecycle
"""

from __future__ import annotations

import dataclasses
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from .blob_store import LocalBlobStore
from .config import PromptframeConfig
from .exceptions import ConfigurationError
from .generation_params import GenerationParams, OutputFormat, Resolution

logger = logging.getLogger(__name__)


@dataclass
class ProviderResult:
    """Normalised output of a provider call.

    Attributes:
        image_urls: Retrievable image URLs, in generation order.
        request_id: Opaque provider request id, when the provider returns one.
    """

    image_urls: list[str] = field(default_factory=list)
    request_id: str | None = None


class ProviderAdapterBase(ABC):
    """Abstract base class for all provider adapters.

    Attributes
    ----------
    name : str
        Provider id used in requests and records (e.g. "fal")
    label : str
        Human-readable provider name
    model_label : str
        Human-readable model name
    description : str
        Short description shown in the option catalogue
    credential_env_field : str
        Name of the config field holding the credential's environment
        variable name
    supports_batch : bool
        Whether one provider call yields all requested images
    forced_resolution : str | None
        Resolution always used by this provider, or None to honour the caller
    forced_output_format : str | None
        Output format always used by this provider, or None to honour the caller
    """

    name: str = "base"
    label: str = "Base Provider"
    model_label: str = ""
    description: str = "Base class for provider adapters"
    credential_env_field: str = ""
    supports_batch: bool = False
    forced_resolution: Resolution | None = None
    forced_output_format: OutputFormat | None = None

    def __init__(
        self,
        config: PromptframeConfig,
        blob_store: LocalBlobStore | None = None,
    ) -> None:
        """Initialize the provider adapter.

        Args:
            config: Configuration object
            blob_store: Blob store for providers that return raw image bytes
        """
        self.config = config
        self.blob_store = blob_store

    @classmethod
    def resolve_params(cls, params: GenerationParams) -> GenerationParams:
        """Apply this provider's forced overrides to *params*."""
        overrides: dict[str, Any] = {}
        if cls.forced_resolution is not None:
            overrides["resolution"] = cls.forced_resolution
        if cls.forced_output_format is not None:
            overrides["output_format"] = cls.forced_output_format
        if not overrides:
            return params
        return dataclasses.replace(params, **overrides)

    @classmethod
    @abstractmethod
    def model_id(cls, config: PromptframeConfig) -> str:
        """Return the provider model identifier recorded on each generation."""
        pass

    def require_credential(self) -> str:
        """Read this provider's credential from the environment.

        Raises:
            ConfigurationError: If the credential is missing.
        """
        env_name = getattr(self.config, self.credential_env_field)
        credential = self.config.get_credential(env_name)
        if credential is None:
            raise ConfigurationError(f"Missing {env_name} environment variable.")
        return credential

    @abstractmethod
    def generate(self, params: GenerationParams) -> ProviderResult:
        """Run the provider call(s) for *params*.

        Raises
        ------
        ConfigurationError
            If the provider credential is missing (before any network call)
        ProviderError
            If the provider fails or yields no usable images
        """
        pass

    @classmethod
    def get_provider_info(cls, config: PromptframeConfig) -> dict[str, Any]:
        """Return catalogue metadata about this provider."""
        return {
            "id": cls.name,
            "label": cls.label,
            "model": cls.model_label,
            "model_id": cls.model_id(config),
            "description": cls.description,
            "supports_batch": cls.supports_batch,
            "forced_resolution": cls.forced_resolution,
            "forced_output_format": cls.forced_output_format,
        }


class ProviderRegistry:
    """Registry of available provider adapters, keyed by provider id."""

    def __init__(self) -> None:
        self._adapters: dict[str, type[ProviderAdapterBase]] = {}

    def register(self, adapter_class: type[ProviderAdapterBase]) -> type[ProviderAdapterBase]:
        """Register a provider adapter class.

        Returns the class so this method can be used as a decorator.
        """
        provider_name = adapter_class.name

        if provider_name in self._adapters:
            logger.warning(f"Provider adapter '{provider_name}' is already registered, overwriting")

        self._adapters[provider_name] = adapter_class
        logger.debug(f"Registered provider adapter: {provider_name}")
        return adapter_class

    def get_adapter_class(self, provider_name: str) -> type[ProviderAdapterBase]:
        """Get the adapter class for a provider id.

        Raises
        ------
        KeyError
            If provider_name is not registered
        """
        if provider_name not in self._adapters:
            available = ", ".join(self.list_available())
            raise KeyError(
                f"Provider adapter '{provider_name}' not found. Available providers: {available}"
            )
        return self._adapters[provider_name]

    def instantiate(
        self,
        provider_name: str,
        config: PromptframeConfig,
        blob_store: LocalBlobStore | None = None,
    ) -> ProviderAdapterBase:
        """Create an instance of a registered provider adapter."""
        adapter_class = self.get_adapter_class(provider_name)
        return adapter_class(config=config, blob_store=blob_store)

    def list_available(self) -> list[str]:
        """List all registered provider ids, in registration order."""
        return list(self._adapters.keys())


# Global provider registry instance
provider_registry = ProviderRegistry()
