"""
Quick local helper: renders one poster per guest from a local template and
guest list into the configured output directory. This bypasses the API and
job queue layers.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

# Ensure project root is importable when running from scripts/
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from poster_service import config
from poster_service.pipeline import process_guest_list


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render guest posters from a local template")
    parser.add_argument("--poster", required=True, help="Path to the template image")
    parser.add_argument("--invites", required=True, help="Path to the guest list CSV")
    parser.add_argument("--output-dir", help="Directory for rendered posters (overrides OUTPUT_DIR)")
    parser.add_argument("--workers", type=int, help="Concurrent renders (overrides RENDER_MAX_WORKERS)")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    overrides = {}
    if args.output_dir:
        overrides["output_dir"] = Path(args.output_dir)
    if args.workers:
        overrides["render_max_workers"] = args.workers
    settings = config.Settings(**overrides)
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    result = process_guest_list(Path(args.poster), Path(args.invites), settings=settings)
    print(f"Rendered {len(result.rendered)}/{result.total} poster(s) into {settings.output_dir}")
    for name in result.failed:
        print(f"  failed: {name}")


if __name__ == "__main__":
    main()
