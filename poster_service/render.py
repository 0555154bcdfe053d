"""
Render a single guest poster.

Each call draws on its own copy of the shared template and writes the PNG
atomically: it is encoded into a scratch file inside a hidden subdirectory of
the output directory, then renamed into place, so listings never pick up a
half-written poster.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
import tempfile
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from . import config
from .errors import RenderError

logger = logging.getLogger(__name__)

SCRATCH_DIRNAME = ".partial"


def _load_font(settings: config.Settings) -> ImageFont.FreeTypeFont:
    """Load the configured TrueType font, or Pillow's bundled scalable font."""
    try:
        if settings.poster_font_path is not None:
            return ImageFont.truetype(str(settings.poster_font_path), settings.poster_font_size)
        return ImageFont.load_default(size=settings.poster_font_size)
    except (OSError, ValueError) as exc:
        raise RenderError(f"Could not load font {settings.poster_font_path or '<default>'}: {exc}") from exc


def draw_name(template: Image.Image, name: str, settings: Optional[config.Settings] = None) -> Image.Image:
    """Return a new image with `name` centred horizontally at the fixed anchor."""
    settings = settings or config.get_settings()
    canvas = template.copy()
    font = _load_font(settings)
    try:
        draw = ImageDraw.Draw(canvas)
        draw.text(
            (canvas.width / 2, settings.poster_text_y),
            name,
            font=font,
            fill=config.text_fill(settings),
            anchor="mm",
        )
    except (OSError, ValueError) as exc:
        raise RenderError(f"Could not draw name {name!r}: {exc}") from exc
    return canvas


def _save_png(image: Image.Image, output_path: Path) -> None:
    scratch_dir = output_path.parent / SCRATCH_DIRNAME
    scratch_dir.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(suffix=".png", dir=scratch_dir)
    try:
        with os.fdopen(fd, "wb") as fh:
            image.save(fh, format="PNG")
        os.replace(tmp_name, output_path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def render_poster(template: Image.Image, name: str, settings: Optional[config.Settings] = None) -> Path:
    """
    Draw `name` onto a copy of `template` and write it to the output directory.

    Returns the written path.

    Raises:
        RenderError: when the font cannot be loaded, drawing fails, or the
            poster cannot be encoded or written.
    """
    settings = settings or config.get_settings()
    filename = config.poster_filename(name, settings)
    if Path(filename).name != filename or os.sep in name:
        raise RenderError(f"Guest name {name!r} cannot be used in a filename")

    poster = draw_name(template, name, settings)
    output_path = Path(settings.output_dir) / filename
    try:
        _save_png(poster, output_path)
    except (OSError, ValueError) as exc:
        raise RenderError(f"Could not write poster for {name!r} to {output_path}: {exc}") from exc

    logger.debug("Rendered poster for %r -> %s", name, output_path)
    return output_path
