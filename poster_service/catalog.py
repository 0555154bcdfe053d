"""
Read-side listing of rendered posters.

The catalog is rebuilt from the output directory on every request rather than
tracked as posters are written. Ids follow lexical filename order and are only
stable within one scan.
"""

from __future__ import annotations

import csv
from dataclasses import asdict, dataclass
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Union
from urllib.parse import quote, urljoin

from . import config
from .errors import ScanError

logger = logging.getLogger(__name__)

POSTERS_ROUTE = "guest_posters"


@dataclass(frozen=True)
class PosterRecord:
    id: int
    name: str
    full: str
    url: str

    def to_dict(self) -> dict:
        return asdict(self)


def poster_url(filename: str, settings: Optional[config.Settings] = None) -> str:
    settings = settings or config.get_settings()
    base = settings.public_base_url.rstrip("/") + "/"
    return urljoin(base, f"{POSTERS_ROUTE}/{quote(filename)}")


def guest_name_from_stem(stem: str, settings: Optional[config.Settings] = None) -> str:
    """Recover the guest name; stems without the prefix are returned trimmed."""
    return stem.removeprefix(config.poster_name_prefix(settings)).strip()


def list_posters(
    output_dir: Union[str, Path, None] = None,
    settings: Optional[config.Settings] = None,
) -> List[PosterRecord]:
    """
    Scan `output_dir` (non-recursively) and build one record per file.

    Raises:
        ScanError: when the directory itself cannot be opened.
    """
    settings = settings or config.get_settings()
    output_dir = Path(output_dir if output_dir is not None else settings.output_dir)
    try:
        with os.scandir(output_dir) as it:
            filenames = sorted(
                entry.name
                for entry in it
                if entry.is_file() and entry.name != settings.summary_filename
            )
    except OSError as exc:
        raise ScanError(f"Could not scan poster directory {output_dir}: {exc}") from exc

    records = []
    for poster_id, filename in enumerate(filenames, start=1):
        stem = os.path.splitext(filename)[0]
        records.append(
            PosterRecord(
                id=poster_id,
                name=guest_name_from_stem(stem, settings),
                full=stem,
                url=poster_url(filename, settings),
            )
        )
    return records


def write_summary(records: Iterable[PosterRecord], path: Union[str, Path]) -> int:
    """Write the `name,full,url` summary CSV and return the number of rows."""
    count = 0
    with Path(path).open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(["name", "full", "url"])
        for record in records:
            writer.writerow([record.name, record.full, record.url])
            count += 1
    logger.info("Wrote %d poster(s) to summary %s", count, path)
    return count
