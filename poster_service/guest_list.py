"""Guest list parsing: one name per CSV row, taken from the first field."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import List, Union

from .errors import ParseError

logger = logging.getLogger(__name__)


def _check_bare_quotes(text: str, path: Path) -> None:
    """
    Reject a `"` inside a field that does not start with one.

    The `csv` module keeps such quotes as literal characters even in strict
    mode; a bare quote is treated as a malformed row here.
    """
    line = 1
    in_quotes = False
    field_start = True
    idx = 0
    while idx < len(text):
        ch = text[idx]
        if in_quotes:
            if ch == '"':
                if text[idx + 1 : idx + 2] == '"':
                    idx += 1
                else:
                    in_quotes = False
            elif ch == "\n":
                line += 1
        elif ch == '"':
            if not field_start:
                raise ParseError(f'{path}:{line}: bare " in non-quoted field')
            in_quotes = True
            field_start = False
        elif ch in ",\r\n":
            field_start = True
            if ch == "\n":
                line += 1
        else:
            field_start = False
        idx += 1


def parse_guest_list(path: Union[str, Path]) -> List[str]:
    """
    Return guest names in file order.

    Extra columns are ignored and blank lines skipped. Any malformed row fails
    the whole parse: a quoting error (including a bare `"` inside an unquoted
    field), or a row whose field count differs from the first row's.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(f"Could not read guest list {path}: {exc}") from exc

    _check_bare_quotes(text, path)

    names: List[str] = []
    expected_fields = None
    try:
        reader = csv.reader(io.StringIO(text, newline=""), strict=True)
        for row in reader:
            if not row:
                continue
            if expected_fields is None:
                expected_fields = len(row)
            elif len(row) != expected_fields:
                raise ParseError(
                    f"{path}:{reader.line_num}: expected {expected_fields} fields, got {len(row)}"
                )
            names.append(row[0])
    except csv.Error as exc:
        raise ParseError(f"{path}: malformed CSV: {exc}") from exc

    logger.info("Parsed %d guest(s) from %s", len(names), path)
    return names
