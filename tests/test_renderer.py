"""Tests for the frame renderer.

Tests cover:
- Frame buffer shape, orientation and finiteness
- Reproducibility for a fixed seed
- Batching does not change the result
- Frames average into the final image
- Progress reporting and error handling
"""

import numpy as np
import pytest


@pytest.fixture
def small_scene(simple_camera):
    """A diffuse sphere below a light, seen by the simple camera."""
    from pathtracer.camera.thin_lens import setup_camera
    from pathtracer.scene.manager import SceneManager

    world = SceneManager()
    world.add_sphere((0.0, 0.0, -2.0), 1.0, world.add_lambertian_material((0.7, 0.3, 0.3)))
    world.add_sphere((0.0, -101.0, -2.0), 100.0, world.add_metal_material((0.8, 0.8, 0.8), 0.2))
    world.add_point_light((0.0, 3.0, 0.0), luminosity=50.0)
    setup_camera(simple_camera)
    return world


def _renderer(width=12, height=10, frames=3, samples=2, max_depth=8):
    from pathtracer.core.renderer import FrameRenderer
    from pathtracer.scene.settings import ImageSettings, RenderSettings

    return FrameRenderer(
        ImageSettings(aspect=width / height, width=width, height=height),
        RenderSettings(frame_count=frames, samples_per_frame=samples, max_depth=max_depth),
    )


class TestReduceFrames:
    """Tests for reduce_frames."""

    def test_mean_over_frames(self):
        from pathtracer.core.renderer import reduce_frames

        frames = np.stack(
            [np.full((2, 3, 3), value, dtype=np.float32) for value in (0.0, 1.0, 5.0)]
        )
        image = reduce_frames(frames)
        assert image.shape == (2, 3, 3)
        assert image.dtype == np.float32
        assert np.allclose(image, 2.0)

    def test_empty_raises(self):
        from pathtracer.core.renderer import reduce_frames

        with pytest.raises(ValueError, match="non-empty"):
            reduce_frames(np.zeros((0, 2, 2, 3), dtype=np.float32))


class TestFrameRenderer:
    """Tests for FrameRenderer.render and friends."""

    def test_image_shape_and_values(self, small_scene):
        renderer = _renderer()
        image = renderer.render(seed=11)

        assert image.shape == (10, 12, 3)
        assert image.dtype == np.float32
        assert np.all(np.isfinite(image))
        assert np.all(image >= 0.0)
        assert image.max() > 0.0
        assert renderer.frames_rendered == 3

    def test_empty_scene_is_sky(self, simple_camera):
        """Test the top row is bluer than the bottom row with nothing in view."""
        from pathtracer.camera.thin_lens import setup_camera

        setup_camera(simple_camera)
        image = _renderer(frames=1, samples=1).render(seed=1)

        # Row 0 is the top of the image
        assert image[0, :, 0].mean() < image[-1, :, 0].mean()
        assert np.allclose(image[:, :, 2], 0.5, atol=1e-5)

    def test_same_seed_is_reproducible(self, small_scene):
        first = _renderer().render(seed=42)
        second = _renderer().render(seed=42)
        np.testing.assert_array_equal(first, second)

    def test_different_seeds_differ(self, small_scene):
        first = _renderer().render(seed=1)
        second = _renderer().render(seed=2)
        assert not np.array_equal(first, second)

    @pytest.mark.parametrize("batch_size", [1, 2, 5])
    def test_batching_does_not_change_result(self, small_scene, batch_size):
        whole = _renderer().render(seed=9)
        batched = _renderer().render(seed=9, batch_size=batch_size)
        np.testing.assert_array_equal(whole, batched)

    def test_image_is_mean_of_frames(self, small_scene):
        from pathtracer.core.renderer import reduce_frames

        frames = _renderer().render_frames(seed=3)
        image = _renderer().render(seed=3)
        assert frames.shape == (3, 10, 12, 3)
        np.testing.assert_allclose(reduce_frames(frames), image, rtol=1e-6)

    def test_frames_use_independent_streams(self, small_scene):
        frames = _renderer().render_frames(seed=3)
        assert not np.array_equal(frames[0], frames[1])

    def test_more_frames_converge(self, small_scene):
        """Test many frames and one frame with as many samples agree per pixel."""
        frames = _renderer(width=8, height=8, frames=16, samples=16, max_depth=4).render_frames(
            seed=5
        )
        many = frames.mean(axis=0)
        one = _renderer(width=8, height=8, frames=1, samples=256, max_depth=4).render(seed=6)

        # Standard error of each estimate, taken from the spread of the frames
        std_err = frames.std(axis=0, ddof=1) / np.sqrt(frames.shape[0])
        bound = 6.0 * np.sqrt(2.0) * std_err + 0.01
        assert np.all(np.abs(many - one) <= bound)

    def test_callback_progress(self, small_scene):
        calls = []
        _renderer(frames=5).render(seed=1, batch_size=2, callback=lambda d, t: calls.append((d, t)))
        assert calls == [(2, 5), (4, 5), (5, 5)]

    def test_render_progressive(self, small_scene):
        renderer = _renderer(frames=3)
        progress = list(renderer.render_progressive(seed=8))

        assert progress == [(1, 3), (2, 3), (3, 3)]
        np.testing.assert_array_equal(renderer.get_image_numpy(), _renderer().render(seed=8))

    def test_invalid_batch_size(self, small_scene):
        with pytest.raises(ValueError, match="batch_size"):
            _renderer().render(seed=1, batch_size=0)

    def test_too_many_frames(self, small_scene):
        from pathtracer.core.sampler import MAX_STREAMS

        with pytest.raises(RuntimeError, match="Maximum number of streams"):
            _renderer(width=1, height=1, frames=MAX_STREAMS + 1, samples=1).render(seed=1)


class TestRendererOutput:
    """Tests for image access before and after rendering."""

    def test_nothing_rendered(self):
        renderer = _renderer()
        with pytest.raises(RuntimeError, match="Nothing rendered yet"):
            renderer.get_image_numpy()
        with pytest.raises(RuntimeError, match="Nothing rendered yet"):
            renderer.get_image_uint8()

    def test_get_image_numpy_returns_copy(self, small_scene):
        renderer = _renderer()
        renderer.render(seed=2)
        image = renderer.get_image_numpy()
        image[:] = -1.0
        assert np.all(renderer.get_image_numpy() >= 0.0)

    def test_get_image_uint8(self, small_scene):
        renderer = _renderer()
        renderer.render(seed=2)
        image = renderer.get_image_uint8(srgb=True)
        assert image.shape == (10, 12, 3)
        assert image.dtype == np.uint8

    def test_save_image(self, small_scene, tmp_path):
        from PIL import Image as PILImage

        renderer = _renderer()
        renderer.render(seed=2)
        renderer.save_image(tmp_path / "out.png", srgb=True)
        with PILImage.open(tmp_path / "out.png") as img:
            assert img.size == (12, 10)

    def test_repr(self):
        assert repr(_renderer()) == (
            "FrameRenderer(width=12, height=10, frames=0/3, samples_per_frame=2)"
        )


class TestRenderScene:
    """Tests for render_scene."""

    def test_render_scene(self, small_scene, simple_camera):
        from pathtracer.core.renderer import render_scene
        from pathtracer.scene.scene import Scene
        from pathtracer.scene.settings import ImageSettings, RenderSettings

        scene = Scene(
            image=ImageSettings(aspect=1.0, width=6, height=6),
            render=RenderSettings(frame_count=2, samples_per_frame=1, max_depth=3),
            world=small_scene,
        )
        image = render_scene(scene, simple_camera, seed=4)
        assert image.shape == (6, 6, 3)
        assert np.all(np.isfinite(image))

    def test_render_scene_reloads_its_world(self, simple_camera):
        """Test a scene renders its own world after another scene was built."""
        from pathtracer.core.renderer import render_scene
        from pathtracer.scene.manager import SceneManager
        from pathtracer.scene.scene import Scene
        from pathtracer.scene.settings import ImageSettings, RenderSettings

        image = ImageSettings(aspect=1.0, width=6, height=6)
        render = RenderSettings(frame_count=2, samples_per_frame=1, max_depth=3)

        sky = Scene(image=image, render=render, world=SceneManager())
        expected = render_scene(sky, simple_camera, seed=4)

        # A black sphere enclosing the camera
        enclosure = SceneManager()
        enclosure.add_sphere((0.0, 0.0, 0.0), 5.0, enclosure.add_lambertian_material((0, 0, 0)))
        enclosed = render_scene(
            Scene(image=image, render=render, world=enclosure), simple_camera, seed=4
        )
        assert np.all(enclosed == 0.0)

        actual = render_scene(sky, simple_camera, seed=4)
        np.testing.assert_array_equal(actual, expected)
        assert actual.max() > 0.0
