"""
High-level poster generation pipeline.

`process_guest_list` is the entry point used by both the job queue behind the
HTTP API and the local CLI script. It keeps orchestration simple:
template + guest list -> bounded batch render -> posters on disk.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from . import config
from .batch import BatchResult, run_batch
from .guest_list import parse_guest_list
from .template import load_template

logger = logging.getLogger(__name__)


def process_guest_list(
    poster_path: Union[str, Path],
    invites_path: Union[str, Path],
    settings: Optional[config.Settings] = None,
) -> BatchResult:
    """
    Render a poster for every guest in `invites_path` onto `poster_path`.

    Raises:
        LoadError: when the template cannot be decoded.
        ParseError: when the guest list is malformed.
        OSError: when the output directory cannot be created.

    Both errors are raised before any poster is rendered.
    """
    settings = settings or config.get_settings()
    template = load_template(poster_path)
    names = parse_guest_list(invites_path)
    Path(settings.output_dir).mkdir(parents=True, exist_ok=True)
    logger.info("Rendering %d poster(s) into %s", len(names), settings.output_dir)
    return run_batch(template, names, settings=settings)
