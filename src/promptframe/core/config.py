"""Configuration management for Promptframe.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the PROMPTFRAME_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (PROMPTFRAME_* prefix)
2. .env file in the project root
3. Default values defined in PromptframeConfig

Example .env file:
    PROMPTFRAME_FAL_MODEL_ID=fal-ai/nano-banana-pro
    PROMPTFRAME_HF_MODEL_ID=ByteDance/SDXL-Lightning
    PROMPTFRAME_DATA_DIR=data
    PROMPTFRAME_SERVER_PORT=7860

Provider Credentials
--------------------
Provider secrets are *not* configuration fields.  The config only names the
environment variables that hold them (``FAL_KEY`` and ``HF_TOKEN`` by
default).  Adapters read the variable at call time through
:meth:`PromptframeConfig.get_credential`, so a missing secret is reported per
request instead of once at import time.

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.

    from promptframe.core.config import config

    print(config.fal_model_id)
    print(config.database_path)
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from promptframe.core.generation_params import MAX_IMAGES, MIN_IMAGES


class PromptframeConfig(BaseSettings):
    """Main configuration for Promptframe.

    Attributes
    ----------
    Provider Settings:
        fal_model_id : str
            fal.ai application identifier used for batched generation
        hf_model_id : str
            HuggingFace model ID used for per-image generation
        fal_key_env : str
            Name of the environment variable holding the fal.ai key
        hf_token_env : str
            Name of the environment variable holding the HuggingFace token

    Generation Settings:
        hf_base_size : int
            Pixel length of the longer side for HuggingFace images
        dimension_multiple : int
            HuggingFace width/height are rounded to a multiple of this value
        max_images : int
            Upper bound for the number of images per request (at most 4)

    Listing:
        default_list_limit : int
            Number of records returned by the gallery listing when no limit
            is supplied

    Paths:
        data_dir : Path
            Directory holding the SQLite database
        blob_dir : Path
            Directory holding stored image blobs
        blob_url_prefix : str
            URL prefix under which blobs are served

    Server Settings:
        server_host : str
            Server bind address
        server_port : int
            Server port (1024-65535)
        log_level : str
            Logging level for the CLI entry point
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROMPTFRAME_",
        case_sensitive=False,
    )

    # Provider settings
    fal_model_id: str = Field(
        default="fal-ai/nano-banana-pro",
        description="fal.ai application identifier",
    )
    hf_model_id: str = Field(
        default="ByteDance/SDXL-Lightning",
        description="HuggingFace model ID for text-to-image inference",
    )
    fal_key_env: str = Field(
        default="FAL_KEY",
        description="Environment variable holding the fal.ai API key",
    )
    hf_token_env: str = Field(
        default="HF_TOKEN",
        description="Environment variable holding the HuggingFace access token",
    )

    # Generation settings
    hf_base_size: int = Field(default=1024, ge=64, le=4096)
    dimension_multiple: int = Field(default=64, ge=1)
    max_images: int = Field(default=MAX_IMAGES, ge=MIN_IMAGES, le=MAX_IMAGES)

    # Listing
    default_list_limit: int = Field(
        default=24,
        description="Number of gallery records returned when no limit is given",
        ge=1,
    )

    # Paths
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the generations database",
    )
    blob_dir: Path = Field(
        default=Path("data/blobs"),
        description="Directory holding stored image blobs",
    )
    blob_url_prefix: str = Field(
        default="/static/blobs",
        description="URL prefix under which stored blobs are served",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level used by the CLI entry point",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create required directories.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.blob_dir.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        """Path of the SQLite database holding generation records."""
        return self.data_dir / "generations.db"

    def get_credential(self, env_name: str) -> str | None:
        """Read a provider credential from the process environment.

        Blank values count as missing.

        Args:
            env_name: Name of the environment variable

        Returns:
            The stripped credential, or None when unset or blank
        """
        value = os.environ.get(env_name, "").strip()
        return value or None


# Global configuration instance
config = PromptframeConfig()
