"""Normalisation of raw generation inputs into closed, provider-ready values.

Every function in this module is total: any input, including ``None`` and
unrecognised strings, maps to a valid value.  Bad cosmetic input (an unknown
provider, an unsupported aspect ratio, an out-of-range image count) is
coerced to a safe default instead of being rejected, so a generation request
never fails because of a form field.

The one exception is the prompt itself, which is whitespace-trimmed here
but checked for emptiness at the API boundary.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, get_args

Provider = Literal["fal", "huggingface"]
AspectRatio = Literal["1:1", "4:3", "3:2", "16:9", "9:16"]
Resolution = Literal["1K", "2K", "4K"]
OutputFormat = Literal["png", "jpeg", "webp"]

PROVIDERS: tuple[str, ...] = get_args(Provider)
ASPECT_RATIOS: tuple[str, ...] = get_args(AspectRatio)
RESOLUTIONS: tuple[str, ...] = get_args(Resolution)
OUTPUT_FORMATS: tuple[str, ...] = get_args(OutputFormat)

DEFAULT_PROVIDER: Provider = "fal"
DEFAULT_ASPECT_RATIO: AspectRatio = "1:1"
DEFAULT_RESOLUTION: Resolution = "1K"
DEFAULT_OUTPUT_FORMAT: OutputFormat = "png"

MIN_IMAGES = 1
MAX_IMAGES = 4

# Aspect ratio string -> (width, height) integer pair.
ASPECT_RATIO_MAP: dict[str, tuple[int, int]] = {
    "1:1": (1, 1),
    "4:3": (4, 3),
    "3:2": (3, 2),
    "16:9": (16, 9),
    "9:16": (9, 16),
}


def _normalize_choice(value: str | None, choices: tuple[str, ...], default: str) -> str:
    """Return *value* if it is one of *choices*, otherwise *default*."""
    if isinstance(value, str) and value in choices:
        return value
    return default


def normalize_provider(provider: str | None) -> Provider:
    """Map any provider selector to a supported provider, defaulting to fal."""
    return _normalize_choice(provider, PROVIDERS, DEFAULT_PROVIDER)  # type: ignore[return-value]


def normalize_aspect_ratio(aspect_ratio: str | None) -> AspectRatio:
    """Map any aspect ratio string to a supported ratio, defaulting to 1:1."""
    return _normalize_choice(  # type: ignore[return-value]
        aspect_ratio, ASPECT_RATIOS, DEFAULT_ASPECT_RATIO
    )


def normalize_resolution(resolution: str | None) -> Resolution:
    """Map any resolution string to a supported resolution, defaulting to 1K."""
    return _normalize_choice(  # type: ignore[return-value]
        resolution, RESOLUTIONS, DEFAULT_RESOLUTION
    )


def normalize_output_format(output_format: str | None) -> OutputFormat:
    """Map any output format string to a supported format, defaulting to png."""
    return _normalize_choice(  # type: ignore[return-value]
        output_format, OUTPUT_FORMATS, DEFAULT_OUTPUT_FORMAT
    )


def clamp_num_images(
    num_images: int | float | None, max_images: int = MAX_IMAGES
) -> int:
    """Clamp a requested image count into ``[1, min(max_images, 4)]``.

    ``None`` (and NaN) means "not specified" and resolves to a single image.
    Fractional counts are truncated.  A configured *max_images* above
    :data:`MAX_IMAGES` is capped.

    Examples:
        >>> clamp_num_images(0)
        1
        >>> clamp_num_images(7)
        4
        >>> clamp_num_images(3)
        3
        >>> clamp_num_images(2.5)
        2
    """
    if num_images is None or math.isnan(num_images):
        return MIN_IMAGES
    upper = max(MIN_IMAGES, min(MAX_IMAGES, max_images))
    return int(min(upper, max(MIN_IMAGES, num_images)))


def round_to_multiple(value: float, multiple: int) -> int:
    """Round *value* to the nearest multiple of *multiple*, never below *multiple*.

    Uses half-up rounding so that results do not depend on Python's
    banker's rounding of exact halves.
    """
    rounded = int(value / multiple + 0.5) * multiple
    return max(multiple, rounded)


def resolve_dimensions(
    aspect_ratio: str | None,
    base_size: int = 1024,
    multiple: int = 64,
) -> tuple[int, int]:
    """Compute pixel width and height for an aspect ratio.

    The longer side of the ratio is scaled to *base_size* and both sides
    are rounded to a multiple of *multiple*.  Unsupported ratios fall back
    to 1:1.

    Args:
        aspect_ratio: Ratio string such as ``"16:9"``.
        base_size: Pixel length of the longer side.
        multiple: Rounding step for both dimensions.

    Returns:
        Tuple of ``(width, height)``.

    Examples:
        >>> resolve_dimensions("16:9")
        (1024, 576)
        >>> resolve_dimensions("9:16")
        (576, 1024)
    """
    ratio_width, ratio_height = ASPECT_RATIO_MAP.get(
        normalize_aspect_ratio(aspect_ratio), (1, 1)
    )
    scale = base_size / max(ratio_width, ratio_height)

    width = round_to_multiple(ratio_width * scale, multiple)
    height = round_to_multiple(ratio_height * scale, multiple)
    return width, height


@dataclass(frozen=True)
class GenerationParams:
    """A fully normalised generation request.

    Instances are produced by :func:`normalize_params` and are safe to
    persist and to hand to any provider adapter.
    """

    prompt: str
    provider: Provider
    aspect_ratio: AspectRatio
    resolution: Resolution
    output_format: OutputFormat
    num_images: int


def normalize_params(
    prompt: str,
    aspect_ratio: str | None = None,
    resolution: str | None = None,
    output_format: str | None = None,
    num_images: int | float | None = None,
    provider: str | None = None,
    *,
    max_images: int = MAX_IMAGES,
) -> GenerationParams:
    """Normalise raw request fields into :class:`GenerationParams`.

    Provider-specific overrides (for example HuggingFace's fixed resolution
    and format) are applied afterwards by the provider adapter class, see
    :meth:`ProviderAdapterBase.resolve_params`.
    """
    return GenerationParams(
        prompt=(prompt or "").strip(),
        provider=normalize_provider(provider),
        aspect_ratio=normalize_aspect_ratio(aspect_ratio),
        resolution=normalize_resolution(resolution),
        output_format=normalize_output_format(output_format),
        num_images=clamp_num_images(num_images, max_images),
    )
