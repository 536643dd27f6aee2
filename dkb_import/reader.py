"""Read a DKB statement export into header-keyed rows.

DKB exports start with a few human-readable metadata lines (account, period,
balance) before the real header. The reader drops a fixed number of those
lines, treats the next line as the header and maps every following non-blank
line onto it. Lines with a different field count than the header are
tolerated: missing trailing fields become ``""`` and surplus fields are
dropped.

Parsing follows the stdlib :mod:`csv` dialect rules (double-quote quoting,
doubled quotes, embedded newlines inside quoted fields).
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterator

from .errors import ParseError
from .models import RawRow

DEFAULT_DELIMITER = ";"
DEFAULT_SKIP_LINES = 4

_BOM = "\ufeff"


def _slice_after_preamble(content: str, skip_lines: int) -> io.StringIO:
    """Return a text stream that starts at the header line.

    Raises :class:`ParseError` when ``skip_lines`` is negative or leaves no
    non-empty header line behind.
    """

    if skip_lines < 0:
        raise ParseError(f"skip_lines must be non-negative, got {skip_lines}")

    # Break on "\n" only, as csv does; keep endings so quoted newlines survive.
    lines = io.StringIO(content.removeprefix(_BOM)).readlines()
    if skip_lines >= len(lines):
        raise ParseError(
            f"cannot skip {skip_lines} preamble lines: statement has only {len(lines)} lines "
            "and no header row would remain"
        )
    if not lines[skip_lines].strip():
        raise ParseError(f"header row (line {skip_lines + 1}) is empty")
    return io.StringIO("".join(lines[skip_lines:]))


def iter_rows(
    content: str,
    *,
    delimiter: str = DEFAULT_DELIMITER,
    skip_lines: int = DEFAULT_SKIP_LINES,
) -> Iterator[tuple[int, RawRow]]:
    """Yield ``(line_no, row)`` pairs in file order.

    ``line_no`` is the 1-based physical line on which the row ends, counted
    from the very top of ``content`` (preamble included), which makes it
    usable in error reports.
    """

    if len(delimiter) != 1:
        raise ValueError(f"delimiter must be a single character, got {delimiter!r}")

    stream = _slice_after_preamble(content, skip_lines)
    reader = csv.reader(stream, delimiter=delimiter)
    header_fields = next(reader, None)
    if header_fields is None or not any(h.strip() for h in header_fields):
        raise ParseError(f"header row (line {skip_lines + 1}) is empty")
    header = [h.strip() for h in header_fields]
    width = len(header)

    for fields in reader:
        if not any(f.strip() for f in fields):
            continue
        if len(fields) < width:
            fields = fields + [""] * (width - len(fields))
        yield skip_lines + reader.line_num, dict(zip(header, fields[:width], strict=True))


def read_rows(
    content: str,
    *,
    delimiter: str = DEFAULT_DELIMITER,
    skip_lines: int = DEFAULT_SKIP_LINES,
) -> list[RawRow]:
    """Parse statement text into an ordered list of header-keyed rows.

    Parameters
    ----------
    content:
        Full statement text (already decoded from UTF-8).
    delimiter:
        Single field separator character; DKB uses ``";"``.
    skip_lines:
        Number of preamble lines before the header; DKB uses ``4``.

    Raises
    ------
    ParseError
        When the preamble swallows the whole file or the header is empty.
    """

    return [row for _, row in iter_rows(content, delimiter=delimiter, skip_lines=skip_lines)]


__all__ = ["DEFAULT_DELIMITER", "DEFAULT_SKIP_LINES", "iter_rows", "read_rows"]
