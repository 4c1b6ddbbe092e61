"""Image export utilities for rendered images.

This module provides functions for saving rendered images to files
with support for tone mapping, gamma correction and sRGB encoding.

Supported formats:
    - PNG (8-bit via Pillow)

Example:
    >>> from pathtracer.preview.export import save_png
    >>> from pathtracer.core.renderer import FrameRenderer
    >>>
    >>> renderer = FrameRenderer(image_settings, render_settings)
    >>> renderer.render(seed=1)
    >>> save_png(renderer, "output.png", srgb=True)
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from pathtracer.preview.display import ToneMapMethod, process_image_for_display

if TYPE_CHECKING:
    from pathtracer.core.renderer import FrameRenderer


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
    srgb: bool = False,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float32 image to uint8 for display/export.

    Applies tone mapping and encoding, then quantizes each channel with
    round(value * 255).

    Args:
        image: Linear HDR image array of shape (H, W, 3).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2), ignored when ``srgb``.
        exposure: Exposure value for exposure tone mapping (default 1.0).
        srgb: Use the sRGB transfer curve.

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    processed = process_image_for_display(
        image,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
        srgb=srgb,
    )
    return np.round(processed * 255.0).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
    srgb: bool = False,
) -> None:
    """Save a linear NumPy image as an 8-bit PNG file.

    Args:
        image: Linear HDR image array of shape (H, W, 3), top row first.
        filepath: Output file path (should end in .png).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2), ignored when ``srgb``.
        exposure: Exposure value for exposure tone mapping (default 1.0).
        srgb: Use the sRGB transfer curve.
    """
    image_uint8 = image_to_uint8(
        image,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
        srgb=srgb,
    )
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)


def save_png(
    renderer: FrameRenderer,
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
    srgb: bool = False,
) -> None:
    """Save the image held by a renderer as a PNG file.

    Raises:
        RuntimeError: If the renderer has not rendered anything yet.
    """
    save_png_from_array(
        renderer.get_image_numpy(gamma=1.0),
        filepath,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
        srgb=srgb,
    )


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
