"""Tests for the random spheres render script.

Tests cover:
- Argument defaults (all frames in one parallel launch)
- An end-to-end run writing a PNG
"""

import importlib.util
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parent.parent / "examples" / "render_random_spheres.py"


@pytest.fixture(scope="module")
def script():
    spec = importlib.util.spec_from_file_location("render_random_spheres", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestArguments:
    """Tests for parse_args."""

    def test_defaults(self, script):
        args = script.parse_args([])

        assert args.batch_size is None
        assert args.gamma is None
        assert args.tone_map == "none"
        assert args.output == "random_spheres.png"

    def test_overrides(self, script):
        args = script.parse_args(["--width", "40", "--frames", "3", "--batch-size", "2"])
        assert (args.width, args.frames, args.batch_size) == (40, 3, 2)


class TestRender:
    """End-to-end run of the script's render function."""

    def test_render_writes_png(self, script, tmp_path, capsys):
        from PIL import Image as PILImage

        output = tmp_path / "spheres.png"
        args = script.parse_args(
            [
                "--width", "16",
                "--frames", "3",
                "--samples", "1",
                "--max-depth", "3",
                "--seed", "1",
                "--output", str(output),
            ]
        )
        assert script.render_random_spheres(args) == output

        with PILImage.open(output) as img:
            assert img.size == (16, 10)
        # One launch for all frames, so progress is reported once
        assert capsys.readouterr().out.count("Progress:") == 1
