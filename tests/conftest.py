"""Shared fixtures: isolated settings on tmp_path and tiny generated templates."""

from pathlib import Path

from PIL import Image
import pytest

from poster_service.config import Settings


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        uploads_dir=tmp_path / "uploads",
        output_dir=tmp_path / "guest_posters",
        poster_filename_prefix="Test invitation",
        poster_font_size=12,
        poster_text_y=16,
        render_max_workers=4,
        public_base_url="http://posters.test",
    )


@pytest.fixture
def template_image() -> Image.Image:
    return Image.new("RGBA", (64, 32), color=(10, 20, 30, 255))


@pytest.fixture
def template_path(tmp_path) -> Path:
    path = tmp_path / "poster.png"
    Image.new("RGB", (64, 32), color=(10, 20, 30)).save(path, format="PNG")
    return path


@pytest.fixture
def write_invites(tmp_path):
    def _write(text: str, name: str = "invites.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


def poster_files(output_dir: Path):
    return sorted(p.name for p in Path(output_dir).iterdir() if p.is_file())
