"""Helpers to call exiftool and parse its JSON output.

This module provides a small wrapper around the external ``exiftool``
binary. Despite its name exiftool understands far more than EXIF
(QuickTime/MP4 atoms, RAW maker notes, HEIC...), so it is the second
metadata provider after Pillow.

"No date" and "exiftool broke" are kept apart: the former returns an
empty mapping or ``None``, the latter raises
:class:`picobak.errors.MetadataProviderError`.
"""
import json
import logging
import shutil
import subprocess
from pathlib import Path
from datetime import datetime
from typing import Dict

from .errors import MetadataProviderError
from .utils import parse_date

logger = logging.getLogger(__name__)

# Tags queried, in order of preference.
DATE_TAGS = ["DateTimeOriginal", "CreateDate"]


def has_exiftool():
    """Return ``True`` when the ``exiftool`` binary is found on PATH."""
    return shutil.which("exiftool") is not None


def read_date_tags(path: Path) -> Dict[str, str]:
    """Return the capture-date tags exiftool finds in ``path``.

    The function runs ``exiftool -j -P -DateTimeOriginal -CreateDate`` and
    returns the first JSON entry. ``-P`` keeps exiftool from touching the
    file's modification time.

    Args:
        path: Path to the file to query.

    Returns:
        A dict with exiftool fields, or an empty dict when exiftool is not
        installed or does not support the file.

    Raises:
        MetadataProviderError: exiftool could not be run or printed
            something that isn't its JSON list.
    """
    if not has_exiftool():
        return {}
    cmd = ["exiftool", "-j", "-P"] + [f"-{t}" for t in DATE_TAGS] + [str(path)]
    try:
        r = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
        )
    except OSError as e:
        raise MetadataProviderError(f"cannot run exiftool on {path}: {e}") from e

    if r.returncode != 0 and not r.stdout.strip():
        # exiftool exits 1 for unknown or unsupported file types
        logger.debug("exiftool found nothing in %s: %s", path, r.stderr.strip())
        return {}
    try:
        data = json.loads(r.stdout)
    except json.JSONDecodeError as e:
        raise MetadataProviderError(f"unexpected exiftool output for {path}: {e}") from e
    if not isinstance(data, list) or len(data) != 1 or not isinstance(data[0], dict):
        raise MetadataProviderError(f"unexpected exiftool output for {path}")
    return data[0]


def capture_date_from_exiftool(path: Path) -> datetime | None:
    """Metadata provider returning the first parsable date tag from exiftool."""
    tags = read_date_tags(path)
    for tag in DATE_TAGS:
        value = tags.get(tag)
        dt = parse_date(value) if isinstance(value, str) else None
        if dt:
            return dt
    return None
