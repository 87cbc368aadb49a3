"""Shared pytest fixtures for Promptframe tests."""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock

import pytest

# Keep the import-time global config away from the working tree.
_SESSION_DATA_DIR = Path(tempfile.mkdtemp(prefix="promptframe-tests-"))
os.environ.setdefault("PROMPTFRAME_DATA_DIR", str(_SESSION_DATA_DIR))
os.environ.setdefault("PROMPTFRAME_BLOB_DIR", str(_SESSION_DATA_DIR / "blobs"))

from PIL import Image  # noqa: E402

from promptframe.core.blob_store import LocalBlobStore  # noqa: E402
from promptframe.core.config import PromptframeConfig  # noqa: E402
from promptframe.core.orchestrator import GenerationOrchestrator  # noqa: E402
from promptframe.core.record_store import GenerationStore  # noqa: E402


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_SESSION_DATA_DIR, ignore_errors=True)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> PromptframeConfig:
    """Create a test configuration with temporary directories.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        PromptframeConfig instance for testing
    """
    return PromptframeConfig(
        data_dir=str(temp_dir / "data"),
        blob_dir=str(temp_dir / "data" / "blobs"),
        _env_file=None,
    )


@pytest.fixture
def store(test_config: PromptframeConfig) -> GenerationStore:
    """Generation record store backed by a temporary SQLite file."""
    return GenerationStore(test_config.database_path)


@pytest.fixture
def blob_store(test_config: PromptframeConfig) -> LocalBlobStore:
    """Blob store writing into the temporary blob directory."""
    return LocalBlobStore(test_config.blob_dir, test_config.blob_url_prefix)


@pytest.fixture
def orchestrator(
    test_config: PromptframeConfig,
    store: GenerationStore,
    blob_store: LocalBlobStore,
) -> GenerationOrchestrator:
    """Orchestrator with a strictly increasing fake clock.

    Each call to the clock advances by one second so ordering by
    ``created_at`` is unambiguous.
    """
    ticks = iter(range(1_700_000_000, 1_800_000_000))
    return GenerationOrchestrator(
        config=test_config,
        store=store,
        blob_store=blob_store,
        clock=lambda: float(next(ticks)),
    )


@pytest.fixture
def credentials(monkeypatch) -> None:
    """Provide both provider credentials in the environment."""
    monkeypatch.setenv("FAL_KEY", "test-fal-key")
    monkeypatch.setenv("HF_TOKEN", "test-hf-token")


@pytest.fixture
def fal_client_mock(monkeypatch) -> MagicMock:
    """Replace ``fal_client.SyncClient`` with a mock returning two images.

    Returns:
        The mock client instance; ``fal_client_mock.submit.return_value``
        is the request handle.
    """
    import promptframe.core.adapters.fal as fal_adapter

    handle = MagicMock()
    handle.request_id = "req-123"
    handle.get.return_value = {
        "images": [
            {"url": "https://fal.media/files/a.png", "content_type": "image/png"},
            {"url": "https://fal.media/files/b.png", "content_type": "image/png"},
        ]
    }

    client = MagicMock()
    client.submit.return_value = handle

    monkeypatch.setattr(fal_adapter.fal_client, "SyncClient", MagicMock(return_value=client))
    return client


@pytest.fixture
def hf_client_mock(monkeypatch) -> MagicMock:
    """Replace ``InferenceClient`` in the HuggingFace adapter with a mock.

    Each ``text_to_image`` call returns a small solid-colour PIL image.

    Returns:
        The mock client instance.
    """
    import promptframe.core.adapters.huggingface as hf_adapter

    client = MagicMock()
    client.text_to_image.side_effect = lambda *args, **kwargs: Image.new(
        "RGB", (8, 8), color=(255, 0, 0)
    )

    monkeypatch.setattr(hf_adapter, "InferenceClient", MagicMock(return_value=client))
    return client
