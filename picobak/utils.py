"""Utility helpers for parsing EXIF-style timestamps.

EXIF writes dates as ``YYYY:MM:DD HH:MM:SS``; exiftool may add sub-seconds
and offsets. Explicit formats are tried first, ``dateutil.parser`` handles
the rest.
"""

import os
import sys
from datetime import datetime
import re
from dateutil import parser as dparser

EXPLICIT_FORMATS = [
    "%Y:%m:%d",
    "%Y:%m:%d %H:%M:%S",
    "%Y:%m:%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y:%m:%d %H:%M:%S%z",
    "%Y:%m:%d %H:%M:%S.%f%z",
]


def parse_date(s: str) -> datetime | None:
    """Try to parse the EXIF and ISO timestamp formats.

    Uses explicit strptime formats for speed/accuracy, then falls back to
    dateutil.parser.parse. Returns a timezone-aware datetime when an
    offset is present, otherwise naive. Placeholder values cameras write
    when the clock was never set (``0000:00:00 00:00:00``) return ``None``.
    """
    if not s or not isinstance(s, str):
        return None
    s = s.strip()
    # subseconds only
    if re.fullmatch(r"\d{1,6}", s):
        return None
    if re.fullmatch(r"[0: ]+", s):
        return None

    for fmt in EXPLICIT_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            pass

    # 'YYYY:MM:DD HH:MM:SS(.sss)(±HH:MM)' with odd sub-second widths
    m = re.match(r"(\d{4}):(\d{2}):(\d{2}) (\d{2}:\d{2}:\d{2}(\.\d+)?.*)$", s)
    if m:
        candidate = f"{m.group(1)}-{m.group(2)}-{m.group(3)} {m.group(4)}"
        try:
            return dparser.parse(candidate)
        except (ValueError, OverflowError):
            pass

    try:
        return dparser.parse(s)
    except (ValueError, OverflowError):
        return None


def display_path(path) -> str:
    """Return ``path`` as printable text.

    Names that aren't valid in the filesystem encoding come back from
    :func:`os.fsdecode` with lone surrogates; those are shown as U+FFFD.
    """
    return os.fsencode(path).decode(sys.getfilesystemencoding(), errors="replace")
