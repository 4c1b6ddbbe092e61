"""Frame renderer: multi-sample, multi-frame image estimation.

An image is estimated from ``frame_count`` independent frames. Each frame
averages ``samples_per_frame`` jittered camera samples per pixel and draws
every random number from its own stream (stream id = frame index), so
frames never share mutable state. The final image is the element-wise mean
of the frames.

The frame kernel's outermost loop ranges over frames, which Taichi runs in
parallel; the pixel and sample loops inside a frame are sequential. Frames
may be launched in batches to report progress between launches. A frame's
stream depends only on its index, so batching never changes the result.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.renderer import render_scene
    >>> from pathtracer.scene.random_spheres import create_random_spheres_scene
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=1)
    >>> image = render_scene(scene, camera, seed=1)  # (H, W, 3) linear float32
"""

from collections.abc import Callable, Generator
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.camera.thin_lens import ThinLensCamera, get_ray, setup_camera
from pathtracer.core.integrator import ray_color, sanitize_color
from pathtracer.core.sampler import random_f32, seed_streams
from pathtracer.preview.display import ToneMapMethod
from pathtracer.preview.export import image_to_uint8, save_png_from_array
from pathtracer.scene.settings import ImageSettings, RenderSettings

if TYPE_CHECKING:
    from pathtracer.scene.scene import Scene

# Type alias for progress callback
# Callback receives (frames_done, frame_count)
ProgressCallback = Callable[[int, int], None]


# =============================================================================
# Rendering Kernel
# =============================================================================


@ti.kernel
def _render_frames_kernel(
    frames: ti.types.ndarray(dtype=ti.f32, ndim=4),
    first_frame: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_frame: ti.i32,
    max_depth: ti.i32,
):
    """Render a contiguous batch of frames into ``frames``.

    Args:
        frames: Output buffer of shape (batch, height, width, 3), top row
            first.
        first_frame: Index of the first frame in the batch; frame k of the
            batch draws from stream first_frame + k.
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_frame: Samples per pixel.
        max_depth: Maximum bounces per path.
    """
    u_scale = 1.0 / ti.cast(ti.max(width - 1, 1), ti.f32)
    v_scale = 1.0 / ti.cast(ti.max(height - 1, 1), ti.f32)
    inv_samples = 1.0 / ti.cast(samples_per_frame, ti.f32)

    for k in range(frames.shape[0]):
        stream = first_frame + k
        for j in range(height):
            for i in range(width):
                pixel = tm.vec3(0.0, 0.0, 0.0)
                for _ in range(samples_per_frame):
                    u = (ti.cast(i, ti.f32) + random_f32(stream)) * u_scale
                    v = (ti.cast(j, ti.f32) + random_f32(stream)) * v_scale
                    ray = get_ray(u, v, stream)
                    color = ray_color(ray.origin, ray.direction, max_depth, stream)
                    pixel += sanitize_color(color)

                pixel *= inv_samples
                # Row 0 of the buffer is the top of the image (j = height - 1)
                row = height - 1 - j
                for c in ti.static(range(3)):
                    frames[k, row, i, c] = pixel[c]


def reduce_frames(frames: npt.NDArray[np.float32]) -> npt.NDArray[np.float32]:
    """Average per-frame images into the final image.

    Args:
        frames: Array of shape (F, H, W, 3).

    Returns:
        The element-wise mean over frames, shape (H, W, 3).

    Raises:
        ValueError: If there are no frames.
    """
    if frames.ndim != 4 or frames.shape[0] == 0:
        raise ValueError(f"Expected a non-empty (F, H, W, 3) array, got shape {frames.shape}")
    return frames.mean(axis=0, dtype=np.float64).astype(np.float32)


# =============================================================================
# Frame Renderer
# =============================================================================


class FrameRenderer:
    """Renders the loaded scene through the current camera.

    The scene and camera live in device fields: load a scene (SceneManager)
    and call setup_camera() before rendering. The renderer owns the frame
    buffers and the reduced image.

    Attributes:
        image_settings: Output image geometry.
        settings: Sampling parameters.
    """

    def __init__(self, image_settings: ImageSettings, settings: RenderSettings) -> None:
        self.image_settings = image_settings
        self.settings = settings
        self._image: npt.NDArray[np.float32] | None = None
        self._frames_rendered = 0

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.image_settings.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.image_settings.height

    @property
    def frame_count(self) -> int:
        """Number of frames a full render produces."""
        return self.settings.frame_count

    @property
    def frames_rendered(self) -> int:
        """Number of frames finished by the last (or current) render."""
        return self._frames_rendered

    def _allocate_frames(self) -> npt.NDArray[np.float32]:
        return np.zeros((self.frame_count, self.height, self.width, 3), dtype=np.float32)

    def _render_batches(
        self,
        frames: npt.NDArray[np.float32],
        seed: int | None,
        batch_size: int | None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render all frames into ``frames`` batch by batch, yielding progress."""
        frame_count = self.frame_count
        if batch_size is None:
            batch_size = frame_count
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")

        seed_streams(frame_count, seed)
        self._frames_rendered = 0

        start = 0
        while start < frame_count:
            end = min(start + batch_size, frame_count)
            _render_frames_kernel(
                frames[start:end],
                start,
                self.width,
                self.height,
                self.settings.samples_per_frame,
                self.settings.max_depth,
            )
            start = end
            self._frames_rendered = end
            yield (end, frame_count)

    def render_frames(
        self,
        seed: int | None = None,
        batch_size: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> npt.NDArray[np.float32]:
        """Render every frame and return the per-frame images.

        Args:
            seed: Seed for the per-frame random streams. None draws fresh
                entropy.
            batch_size: Frames per kernel launch. None renders all frames in
                one launch.
            callback: Optional callback called after each batch with
                (frames_done, frame_count).

        Returns:
            Array of shape (frame_count, height, width, 3), linear float32.
        """
        frames = self._allocate_frames()
        for done, total in self._render_batches(frames, seed, batch_size):
            if callback is not None:
                callback(done, total)
        return frames

    def render(
        self,
        seed: int | None = None,
        batch_size: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> npt.NDArray[np.float32]:
        """Render the image.

        Renders every frame, averages them and keeps the result.

        Args:
            seed: Seed for the per-frame random streams. None draws fresh
                entropy.
            batch_size: Frames per kernel launch. None renders all frames in
                one launch.
            callback: Optional callback called after each batch with
                (frames_done, frame_count).

        Returns:
            The linear image, shape (height, width, 3), top row first.

        Example:
            >>> def progress(done, total):
            ...     print(f"Progress: {done}/{total} frames")
            >>> image = renderer.render(seed=1, batch_size=1, callback=progress)
        """
        frames = self.render_frames(seed=seed, batch_size=batch_size, callback=callback)
        self._image = reduce_frames(frames)
        return self._image

    def render_progressive(
        self,
        seed: int | None = None,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the image, yielding progress after each batch of frames.

        This is a generator-based alternative to render() with callbacks.
        The image is available once the generator is exhausted.

        Args:
            seed: Seed for the per-frame random streams.
            batch_size: Frames per kernel launch.

        Yields:
            Tuple of (frames_done, frame_count).

        Example:
            >>> for done, total in renderer.render_progressive(seed=1):
            ...     print(f"Progress: {done}/{total} frames")
            >>> image = renderer.get_image_numpy()
        """
        frames = self._allocate_frames()
        yield from self._render_batches(frames, seed, batch_size)
        self._image = reduce_frames(frames)

    # =========================================================================
    # Output
    # =========================================================================

    def _require_image(self) -> npt.NDArray[np.float32]:
        if self._image is None:
            raise RuntimeError("Nothing rendered yet. Call render() first.")
        return self._image

    def get_image_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float32]:
        """Get the rendered image as a NumPy array.

        With the default gamma of 1.0 this is the unclamped linear image.
        Any other gamma clamps to [0, 1] and gamma-encodes.

        Args:
            gamma: Gamma correction value. Default 1.0 (linear).

        Returns:
            NumPy array of shape (height, width, 3) with dtype float32.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        image = self._require_image()

        if gamma != 1.0:
            return np.power(np.clip(image, 0.0, 1.0), 1.0 / gamma).astype(np.float32)

        return image.copy()

    def get_image_uint8(
        self,
        gamma: float = 2.2,
        srgb: bool = False,
        tone_map: ToneMapMethod = "none",
    ) -> npt.NDArray[np.uint8]:
        """Get the rendered image as an 8-bit NumPy array.

        Args:
            gamma: Gamma correction value, ignored when ``srgb`` is set.
            srgb: Use the sRGB transfer curve.
            tone_map: Tone mapping method.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        return image_to_uint8(self._require_image(), tone_map=tone_map, gamma=gamma, srgb=srgb)

    def save_image(
        self,
        filepath: str | Path,
        gamma: float = 2.2,
        srgb: bool = False,
        tone_map: ToneMapMethod = "none",
    ) -> None:
        """Save the rendered image to a PNG file.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        save_png_from_array(
            self._require_image(), filepath, tone_map=tone_map, gamma=gamma, srgb=srgb
        )

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"FrameRenderer(width={self.width}, height={self.height}, "
            f"frames={self.frames_rendered}/{self.frame_count}, "
            f"samples_per_frame={self.settings.samples_per_frame})"
        )


def render_scene(
    scene: "Scene",
    camera: ThinLensCamera,
    seed: int | None = None,
    batch_size: int | None = None,
    callback: ProgressCallback | None = None,
) -> npt.NDArray[np.float32]:
    """Load a scene into the device tables and render it through a camera.

    Args:
        scene: The render job.
        camera: The camera configuration.
        seed: Seed for the per-frame random streams.
        batch_size: Frames per kernel launch.
        callback: Optional progress callback (frames_done, frame_count).

    Returns:
        The linear image, shape (height, width, 3), top row first.
    """
    scene.world.load()
    setup_camera(camera)
    renderer = FrameRenderer(scene.image, scene.render)
    return renderer.render(seed=seed, batch_size=batch_size, callback=callback)
