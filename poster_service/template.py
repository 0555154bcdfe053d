"""
Template image loading.

The decoded template is shared by every render of a batch, so it is fully
loaded into memory and detached from its file before any worker sees it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from .errors import LoadError

logger = logging.getLogger(__name__)


def load_template(path: Union[str, Path]) -> Image.Image:
    """
    Decode the template at `path` into an RGBA image.

    Raises:
        LoadError: when the file is absent, unreadable or not an image.
    """
    path = Path(path)
    try:
        with Image.open(path) as image:
            image.load()
            template = image.convert("RGBA")
    except FileNotFoundError as exc:
        raise LoadError(f"Template image not found at {path}") from exc
    except UnidentifiedImageError as exc:
        raise LoadError(f"Template at {path} is not a decodable image") from exc
    except (OSError, ValueError) as exc:
        raise LoadError(f"Could not read template image {path}: {exc}") from exc

    logger.info("Loaded template %s size=%sx%s", path, template.width, template.height)
    return template
