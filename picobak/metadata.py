"""Resolve the capture date of a picture.

Providers are asked in order for an embedded capture date; the first one
answering wins. When none does, the file's modification time is used.
"""
import enum
import logging
import os
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from . import exif, exiftool
from .errors import MetadataProviderError, MetadataUnavailable

logger = logging.getLogger(__name__)

Provider = Callable[[Path], Optional[datetime]]


class DateOrigin(enum.Enum):
    EXIF = "EXIF metadata"
    EXIFTOOL = "the exiftool program"
    FILESYSTEM = "filesystem metadata"


@dataclass(frozen=True)
class CaptureTimestamp:
    date: date
    origin: DateOrigin


def default_providers() -> List[Tuple[DateOrigin, Provider]]:
    return [
        (DateOrigin.EXIF, exif.capture_date_from_exif),
        (DateOrigin.EXIFTOOL, exiftool.capture_date_from_exiftool),
    ]


def file_mtime(path: Path) -> float:
    return os.stat(path).st_mtime


def resolve_capture_date(
        path: Path,
        providers: Optional[List[Tuple[DateOrigin, Provider]]] = None,
        mtime_func: Optional[Callable[[Path], float]] = None,
) -> CaptureTimestamp:
    """Return the capture date of ``path``.

    Args:
        path: Picture to inspect.
        providers: ``(origin, provider)`` pairs tried in order. Defaults to
            Pillow EXIF then exiftool.
        mtime_func: Returns the modification timestamp of a path. Tests
            inject this to avoid depending on real file times.

    Raises:
        MetadataUnavailable: no provider found a date and the file
            modification time could not be read either.
    """
    if providers is None:
        providers = default_providers()
    if mtime_func is None:
        mtime_func = file_mtime

    for origin, provider in providers:
        try:
            dt = provider(path)
        except MetadataProviderError as e:
            logger.warning("%s, trying next source", e)
            continue
        if dt is not None:
            logger.debug("%s: %s from %s", path, dt, origin.value)
            return CaptureTimestamp(dt.date(), origin)

    try:
        ts = mtime_func(path)
    except OSError as e:
        raise MetadataUnavailable(
            path, f"no embedded date and cannot stat file: {e}") from e
    return CaptureTimestamp(datetime.fromtimestamp(ts).date(), DateOrigin.FILESYSTEM)
