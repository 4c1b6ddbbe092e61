"""Display encoding for rendered images.

This module turns the linear radiance produced by the renderer into
display-ready values in [0, 1]: optional tone mapping, followed by either
the sRGB transfer curve or a plain power-law gamma.

Features:
    - Tone mapping (Reinhard, exposure-based)
    - sRGB encoding (piecewise curve)
    - Power-law gamma correction

Example:
    >>> from pathtracer.preview.display import process_image_for_display
    >>> display = process_image_for_display(image, tone_map="reinhard", srgb=True)
"""

from __future__ import annotations

from typing import Literal

import numpy as np
import numpy.typing as npt

# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard", "exposure"]

# sRGB transfer curve constants
SRGB_LINEAR_THRESHOLD = 0.0031308
SRGB_LINEAR_SCALE = 12.92
SRGB_ALPHA = 0.055
SRGB_EXPONENT = 2.4


def tone_map_reinhard(
    image: npt.NDArray[np.float32],
) -> npt.NDArray[np.float32]:
    """Apply Reinhard tone mapping: L / (1 + L).

    Simple global tone mapping operator that compresses HDR values
    into the displayable [0, 1] range.

    Args:
        image: Linear HDR image array of shape (H, W, 3).

    Returns:
        Tone mapped image in [0, 1] range.
    """
    image = np.maximum(image, 0.0)
    result = image / (1.0 + image)
    return result.astype(np.float32)


def tone_map_exposure(
    image: npt.NDArray[np.float32],
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply exposure-based tone mapping: 1 - exp(-c * exposure).

    Args:
        image: Linear HDR image array of shape (H, W, 3).
        exposure: Exposure value (default 1.0). Higher values brighten the image.

    Returns:
        Tone mapped image in [0, 1] range.
    """
    image = np.maximum(image, 0.0)
    result = 1.0 - np.exp(-image * exposure)
    return result.astype(np.float32)


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Apply power-law gamma correction: out = in^(1/gamma).

    Args:
        image: Linear image array of shape (H, W, 3) in [0, 1] range.
        gamma: Gamma value (default 2.2). 1.0 leaves the image unchanged.

    Returns:
        Gamma corrected image.

    Raises:
        ValueError: If gamma is not positive.
    """
    if not gamma > 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")
    if gamma == 1.0:
        return image

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    image = np.clip(image, 0.0, 1.0)
    result = np.power(image, 1.0 / gamma)
    return result.astype(np.float32)


def linear_to_srgb(
    image: npt.NDArray[np.float32],
) -> npt.NDArray[np.float32]:
    """Encode linear values with the sRGB transfer curve.

    Values below the threshold use the linear segment (x * 12.92); the rest
    use 1.055 * x^(1/2.4) - 0.055.

    Args:
        image: Linear image array with values in [0, 1] (clamped first).

    Returns:
        sRGB-encoded image in [0, 1].
    """
    image = np.clip(image, 0.0, 1.0)
    low = image * SRGB_LINEAR_SCALE
    high = (1.0 + SRGB_ALPHA) * np.power(image, 1.0 / SRGB_EXPONENT) - SRGB_ALPHA
    result = np.where(image <= SRGB_LINEAR_THRESHOLD, low, high)
    return result.astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
    srgb: bool = False,
) -> npt.NDArray[np.float32]:
    """Process an image for display with tone mapping and encoding.

    Applies the full display pipeline:
    1. Tone mapping (optional, for HDR content)
    2. sRGB encoding when ``srgb`` is set, otherwise gamma correction
    3. Clamping to [0, 1]

    Args:
        image: Linear HDR image array of shape (H, W, 3).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value, ignored when ``srgb`` is set.
        exposure: Exposure value for exposure tone mapping (default 1.0).
        srgb: Use the sRGB transfer curve instead of a power-law gamma.

    Returns:
        Processed image ready for display, in [0, 1] range.

    Raises:
        ValueError: If the tone mapping method is unknown.
    """
    result = np.asarray(image, dtype=np.float32).copy()

    if tone_map == "reinhard":
        result = tone_map_reinhard(result)
    elif tone_map == "exposure":
        result = tone_map_exposure(result, exposure)
    elif tone_map != "none":
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    if srgb:
        result = linear_to_srgb(result)
    else:
        result = apply_gamma(result, gamma)

    result = np.clip(result, 0.0, 1.0)

    return result.astype(np.float32)
