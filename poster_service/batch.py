"""
Bounded-concurrency batch rendering.

A counting admission gate limits how many renders run at once; the dispatching
thread blocks on it, so names are admitted in input order. Each finished render
releases its slot from the future's completion callback, whether it succeeded
or raised. The call returns only after every dispatched render has completed.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
import logging
from pathlib import Path
import threading
from typing import Iterable, List, Optional

from PIL import Image

from . import config
from .render import render_poster

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    total: int = 0
    rendered: List[Path] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def _render_one(template: Image.Image, name: str, settings: config.Settings) -> Optional[Path]:
    """Render one guest, logging failures instead of propagating them."""
    try:
        return render_poster(template, name, settings)
    except Exception as exc:  # noqa: BLE001
        logger.error("Rendering poster for %r failed: %s", name, exc)
        return None


def run_batch(
    template: Image.Image,
    names: Iterable[str],
    settings: Optional[config.Settings] = None,
) -> BatchResult:
    """
    Render one poster per name with at most `render_max_workers` in flight.

    Failures are isolated per name and reported in the result; they never
    cancel or delay other renders.
    """
    settings = settings or config.get_settings()
    max_workers = settings.render_max_workers
    gate = threading.BoundedSemaphore(max_workers)
    dispatched: List[tuple[str, Future]] = []

    def _release(_future: Future) -> None:
        gate.release()

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="poster-render") as pool:
        for name in names:
            gate.acquire()
            try:
                future = pool.submit(_render_one, template, name, settings)
            except BaseException:
                gate.release()
                raise
            future.add_done_callback(_release)
            dispatched.append((name, future))
        logger.info("Dispatched %d render(s) with max_workers=%d", len(dispatched), max_workers)
        wait([future for _, future in dispatched])

    result = BatchResult(total=len(dispatched))
    for name, future in dispatched:
        path = future.result()
        if path is None:
            result.failed.append(name)
        else:
            result.rendered.append(path)

    logger.info(
        "Batch finished total=%d rendered=%d failed=%d",
        result.total,
        len(result.rendered),
        len(result.failed),
    )
    return result
