import pytest

pytest.importorskip("pygame")

from pathtracer.config import ImageConfig  # noqa: E402
from pathtracer.viewer import QUALITY_LEVELS, preview_config, window_size  # noqa: E402


def test_window_size_keeps_aspect_ratio():
    assert window_size(1200, 800) == (1080, 720)
    assert window_size(2560, 720) == (1280, 360)


def test_window_size_never_upscales():
    assert window_size(400, 225) == (400, 225)


def test_preview_config():
    image = ImageConfig(width=400, height=200, samples_per_pixel=100, max_ray_depth=6)
    interactive = preview_config(image, (400, 200), "interactive")
    assert (interactive.width, interactive.height) == (100, 50)
    assert interactive.samples_per_pixel == QUALITY_LEVELS["interactive"]["samples"]
    assert interactive.max_ray_depth == 4
    high = preview_config(image, (400, 200), "high_quality")
    assert high.max_ray_depth == 6
    assert high.shading == image.shading


def test_preview_config_minimum_size():
    image = ImageConfig(width=4, height=4)
    assert preview_config(image, (4, 4), "interactive").width == 2
