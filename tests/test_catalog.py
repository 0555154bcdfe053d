import csv
from pathlib import Path

import pytest

from poster_service.catalog import PosterRecord, list_posters, write_summary
from poster_service.errors import ScanError


def _touch(directory: Path, name: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / name).write_bytes(b"png")


def test_records_follow_lexical_order(settings):
    out = Path(settings.output_dir)
    _touch(out, "Test invitation - Bob.png")
    _touch(out, "Test invitation - Alice.png")

    records = list_posters(out, settings)

    assert [(r.id, r.name, r.full) for r in records] == [
        (1, "Alice", "Test invitation - Alice"),
        (2, "Bob", "Test invitation - Bob"),
    ]
    assert records[0].url == "http://posters.test/guest_posters/Test%20invitation%20-%20Alice.png"


def test_defaults_to_configured_output_dir(settings):
    _touch(Path(settings.output_dir), "Test invitation - Alice.png")
    assert [r.name for r in list_posters(settings=settings)] == ["Alice"]


def test_unprefixed_files_are_still_listed(settings):
    out = Path(settings.output_dir)
    _touch(out, "  stray file .png")
    records = list_posters(out, settings)
    assert [r.name for r in records] == ["stray file"]


def test_subdirectories_and_summary_are_skipped(settings):
    out = Path(settings.output_dir)
    _touch(out, "Test invitation - Alice.png")
    _touch(out / ".partial", "tmp123.png")
    _touch(out / "nested", "Test invitation - Nested.png")
    _touch(out, settings.summary_filename)

    assert [r.name for r in list_posters(out, settings)] == ["Alice"]


def test_missing_directory_is_scan_error(settings, tmp_path):
    with pytest.raises(ScanError):
        list_posters(tmp_path / "does-not-exist", settings)


def test_write_summary(tmp_path):
    records = [
        PosterRecord(id=1, name="Alice", full="Test invitation - Alice", url="http://x/a.png"),
        PosterRecord(id=2, name="Bob", full="Test invitation - Bob", url="http://x/b.png"),
    ]
    path = tmp_path / "summary.csv"

    assert write_summary(records, path) == 2

    with path.open(newline="") as fh:
        rows = list(csv.reader(fh))
    assert rows == [
        ["name", "full", "url"],
        ["Alice", "Test invitation - Alice", "http://x/a.png"],
        ["Bob", "Test invitation - Bob", "http://x/b.png"],
    ]
