"""Tests for provider adapters and the provider registry.

All tests stub ``fal_client.SyncClient`` and ``huggingface_hub.InferenceClient``
so no network access occurs.  Tests cover:

- Registry lookup, ordering and catalogue metadata.
- Forced HuggingFace overrides.
- Fail-fast on missing credentials (before any client is built).
- fal.ai argument mapping, URL filtering, request id and malformed payloads.
- HuggingFace per-image calls, dimensions, blob storage and dropped URLs.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

import promptframe.core.adapters.fal as fal_adapter
import promptframe.core.adapters.huggingface as hf_adapter
from promptframe.core.adapters import FalAdapter, HuggingFaceAdapter
from promptframe.core.exceptions import ConfigurationError, EmptyResultError, ProviderError
from promptframe.core.generation_params import normalize_params
from promptframe.core.provider_adapters import ProviderRegistry, provider_registry


def _params(**overrides):
    values = {
        "prompt": "a red fox in snow",
        "aspect_ratio": "16:9",
        "resolution": "2K",
        "output_format": "webp",
        "num_images": 2,
        "provider": "fal",
    }
    values.update(overrides)
    return normalize_params(**values)


class TestProviderRegistry:
    def test_both_providers_registered_fal_first(self):
        assert provider_registry.list_available()[:2] == ["fal", "huggingface"]

    def test_get_adapter_class(self):
        assert provider_registry.get_adapter_class("huggingface") is HuggingFaceAdapter

    def test_unknown_provider_raises_key_error(self):
        with pytest.raises(KeyError):
            provider_registry.get_adapter_class("dall-e")

    def test_register_returns_class(self):
        registry = ProviderRegistry()
        assert registry.register(FalAdapter) is FalAdapter
        assert registry.list_available() == ["fal"]

    def test_instantiate_passes_blob_store(self, test_config, blob_store):
        adapter = provider_registry.instantiate("huggingface", test_config, blob_store)
        assert isinstance(adapter, HuggingFaceAdapter)
        assert adapter.blob_store is blob_store

    def test_provider_info(self, test_config):
        info = HuggingFaceAdapter.get_provider_info(test_config)
        assert info["id"] == "huggingface"
        assert info["label"] == "Hugging Face"
        assert info["model_id"] == "ByteDance/SDXL-Lightning"
        assert info["forced_resolution"] == "1K"
        assert info["forced_output_format"] == "png"
        assert info["supports_batch"] is False

    def test_only_fal_generates_in_one_batch(self, test_config):
        assert FalAdapter.supports_batch is True
        assert HuggingFaceAdapter.supports_batch is False
        assert FalAdapter.get_provider_info(test_config)["supports_batch"] is True


class TestResolveParams:
    def test_huggingface_forces_resolution_and_format(self):
        params = HuggingFaceAdapter.resolve_params(
            _params(provider="huggingface", resolution="4K", output_format="webp")
        )
        assert params.resolution == "1K"
        assert params.output_format == "png"

    def test_fal_keeps_caller_values(self):
        original = _params(resolution="4K", output_format="jpeg")
        assert FalAdapter.resolve_params(original) is original


class TestFalAdapter:
    def test_missing_key_fails_before_client(self, monkeypatch, test_config):
        monkeypatch.delenv("FAL_KEY", raising=False)
        sync_client = MagicMock()
        monkeypatch.setattr(fal_adapter.fal_client, "SyncClient", sync_client)

        with pytest.raises(ConfigurationError, match="FAL_KEY"):
            FalAdapter(test_config).generate(_params())

        sync_client.assert_not_called()

    def test_submits_batched_arguments(self, credentials, fal_client_mock, test_config):
        FalAdapter(test_config).generate(_params(num_images=3))

        fal_adapter.fal_client.SyncClient.assert_called_once_with(key="test-fal-key")
        fal_client_mock.submit.assert_called_once_with(
            "fal-ai/nano-banana-pro",
            arguments={
                "prompt": "a red fox in snow",
                "aspect_ratio": "16:9",
                "resolution": "2K",
                "output_format": "webp",
                "num_images": 3,
            },
        )

    def test_returns_urls_and_request_id(self, credentials, fal_client_mock, test_config):
        result = FalAdapter(test_config).generate(_params())

        assert result.image_urls == [
            "https://fal.media/files/a.png",
            "https://fal.media/files/b.png",
        ]
        assert result.request_id == "req-123"

    def test_filters_empty_urls(self, credentials, fal_client_mock, test_config):
        fal_client_mock.submit.return_value.get.return_value = {
            "images": [{"url": ""}, {"url": "https://fal.media/x.png"}, {}, {"url": None}]
        }

        result = FalAdapter(test_config).generate(_params())

        assert result.image_urls == ["https://fal.media/x.png"]

    def test_missing_request_id_is_none(self, credentials, fal_client_mock, test_config):
        fal_client_mock.submit.return_value.request_id = ""
        result = FalAdapter(test_config).generate(_params())
        assert result.request_id is None

    def test_no_images_is_empty_result(self, credentials, fal_client_mock, test_config):
        fal_client_mock.submit.return_value.get.return_value = {"images": []}
        with pytest.raises(EmptyResultError):
            FalAdapter(test_config).generate(_params())

    def test_malformed_payload_is_provider_error(self, credentials, fal_client_mock, test_config):
        fal_client_mock.submit.return_value.get.return_value = {"images": "not-a-list"}
        with pytest.raises(ProviderError, match="Malformed"):
            FalAdapter(test_config).generate(_params())

    def test_transport_error_propagates(self, credentials, fal_client_mock, test_config):
        fal_client_mock.submit.side_effect = ConnectionError("connection reset")
        with pytest.raises(ConnectionError, match="connection reset"):
            FalAdapter(test_config).generate(_params())


class TestHuggingFaceAdapter:
    def test_missing_token_fails_before_client(self, monkeypatch, test_config, blob_store):
        monkeypatch.delenv("HF_TOKEN", raising=False)
        inference_client = MagicMock()
        monkeypatch.setattr(hf_adapter, "InferenceClient", inference_client)

        with pytest.raises(ConfigurationError, match="HF_TOKEN"):
            HuggingFaceAdapter(test_config, blob_store).generate(_params(provider="huggingface"))

        inference_client.assert_not_called()

    def test_one_call_per_image_with_dimensions(
        self, credentials, hf_client_mock, test_config, blob_store
    ):
        params = _params(provider="huggingface", aspect_ratio="9:16", num_images=3)

        HuggingFaceAdapter(test_config, blob_store).generate(params)

        hf_adapter.InferenceClient.assert_called_once_with(token="test-hf-token")
        assert hf_client_mock.text_to_image.call_count == 3
        hf_client_mock.text_to_image.assert_called_with(
            "a red fox in snow",
            model="ByteDance/SDXL-Lightning",
            width=576,
            height=1024,
        )

    def test_images_stored_as_png_blobs(
        self, credentials, hf_client_mock, test_config, blob_store
    ):
        result = HuggingFaceAdapter(test_config, blob_store).generate(
            _params(provider="huggingface", num_images=2)
        )

        assert len(result.image_urls) == 2
        assert result.request_id is None
        for url in result.image_urls:
            assert url.startswith("/static/blobs/")
            blob = blob_store.blob_dir / url.rsplit("/", 1)[1]
            assert blob.read_bytes().startswith(b"\x89PNG")

    def test_missing_urls_are_dropped(
        self, credentials, hf_client_mock, test_config, blob_store, monkeypatch
    ):
        """Two of four images without a URL still yield a two-image result."""
        monkeypatch.setattr(
            blob_store,
            "get_url",
            MagicMock(side_effect=["/static/blobs/1.png", None, "/static/blobs/3.png", None]),
        )

        result = HuggingFaceAdapter(test_config, blob_store).generate(
            _params(provider="huggingface", num_images=4)
        )

        assert result.image_urls == ["/static/blobs/1.png", "/static/blobs/3.png"]

    def test_all_urls_missing_is_empty_result(
        self, credentials, hf_client_mock, test_config, blob_store, monkeypatch
    ):
        monkeypatch.setattr(blob_store, "get_url", MagicMock(return_value=None))

        with pytest.raises(EmptyResultError, match="Hugging Face returned no images."):
            HuggingFaceAdapter(test_config, blob_store).generate(
                _params(provider="huggingface", num_images=4)
            )

    def test_inference_error_propagates(
        self, credentials, hf_client_mock, test_config, blob_store
    ):
        hf_client_mock.text_to_image.side_effect = RuntimeError("Model is overloaded")

        with pytest.raises(RuntimeError, match="Model is overloaded"):
            HuggingFaceAdapter(test_config, blob_store).generate(_params(provider="huggingface"))
