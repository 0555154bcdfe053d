from PIL import Image
import pytest

from poster_service.errors import LoadError
from poster_service.template import load_template


def test_load_template_decodes_to_rgba(template_path):
    template = load_template(template_path)
    assert template.mode == "RGBA"
    assert template.size == (64, 32)


def test_load_template_missing_file(tmp_path):
    with pytest.raises(LoadError, match="not found"):
        load_template(tmp_path / "nope.png")


def test_load_template_rejects_non_image(tmp_path):
    path = tmp_path / "poster.png"
    path.write_bytes(b"definitely not a png")
    with pytest.raises(LoadError):
        load_template(path)


def test_load_template_is_detached_from_file(tmp_path):
    path = tmp_path / "poster.png"
    Image.new("RGBA", (8, 8), color=(1, 2, 3, 255)).save(path)
    template = load_template(path)
    path.unlink()
    assert template.getpixel((0, 0)) == (1, 2, 3, 255)
