from pathlib import Path

from PIL import Image, ImageChops
import pytest

from poster_service import render
from poster_service.errors import RenderError


def test_render_writes_named_poster(template_image, settings):
    path = render.render_poster(template_image, "Alice", settings)
    assert path == Path(settings.output_dir) / "Test invitation - Alice.png"
    with Image.open(path) as written:
        assert written.size == template_image.size
        assert ImageChops.difference(written.convert("RGBA"), template_image).getbbox() is not None


def test_render_does_not_mutate_template(template_image, settings):
    before = template_image.tobytes()
    render.render_poster(template_image, "Alice", settings)
    assert template_image.tobytes() == before


def test_rendering_twice_targets_same_path(template_image, settings):
    first = render.render_poster(template_image, "Bob", settings)
    first_bytes = first.read_bytes()
    second = render.render_poster(template_image, "Bob", settings)
    assert first == second
    assert second.read_bytes() == first_bytes


def test_no_scratch_files_left_behind(template_image, settings):
    render.render_poster(template_image, "Alice", settings)
    scratch = Path(settings.output_dir) / render.SCRATCH_DIRNAME
    assert list(scratch.iterdir()) == []


def test_missing_font_is_render_error(template_image, settings, tmp_path):
    settings.poster_font_path = tmp_path / "missing.ttf"
    with pytest.raises(RenderError, match="font"):
        render.render_poster(template_image, "Alice", settings)
    assert not (Path(settings.output_dir) / "Test invitation - Alice.png").exists()


def test_name_with_path_separator_is_rejected(template_image, settings):
    with pytest.raises(RenderError):
        render.render_poster(template_image, "../escape", settings)
