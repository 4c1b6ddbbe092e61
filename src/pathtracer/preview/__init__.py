"""Preview module for image output.

Components:
    display: Tone mapping, gamma correction and sRGB encoding
    export: 8-bit quantization and PNG export (Pillow)

Example:
    >>> from pathtracer.preview import save_png_from_array
    >>> save_png_from_array(image, "output.png", srgb=True)
"""

from pathtracer.preview.display import (
    ToneMapMethod,
    apply_gamma,
    linear_to_srgb,
    process_image_for_display,
    tone_map_exposure,
    tone_map_reinhard,
)
from pathtracer.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_png,
    save_png_from_array,
)

__all__ = [
    # Display functions
    "ToneMapMethod",
    "apply_gamma",
    "linear_to_srgb",
    "process_image_for_display",
    "tone_map_exposure",
    "tone_map_reinhard",
    # Export functions
    "compute_rmse",
    "image_to_uint8",
    "save_png",
    "save_png_from_array",
]
