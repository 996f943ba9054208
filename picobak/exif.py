"""Read the embedded capture date with Pillow.

This is the in-process metadata provider: it covers JPEG, TIFF, WebP and
the other formats Pillow can open without shelling out.
"""
import logging
from datetime import datetime
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .errors import MetadataProviderError
from .utils import display_path, parse_date

logger = logging.getLogger(__name__)

# Only headers are read, never pixels.
Image.MAX_IMAGE_PIXELS = None

EXIF_IFD = 0x8769
DATE_TIME_ORIGINAL = 0x9003


def read_exif_datetime_original(path: Path):
    """Return the raw ``DateTimeOriginal`` string of ``path`` or ``None``.

    Raises:
        MetadataProviderError: the file looked like an image but could
            not be read.
    """
    try:
        with Image.open(path) as img:
            exif = img.getexif()
            value = exif.get_ifd(EXIF_IFD).get(DATE_TIME_ORIGINAL)
    except UnidentifiedImageError:
        # not an image format Pillow knows; exiftool may still handle it
        return None
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        # Pillow reports malformed headers as SyntaxError or ValueError
        raise MetadataProviderError(f"cannot read EXIF from {display_path(path)}: {e}") from e
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="replace")
    if isinstance(value, str):
        # EXIF ASCII values are NUL terminated
        value = value.strip("\x00 ")
    return value or None


def capture_date_from_exif(path: Path) -> datetime | None:
    """Metadata provider returning the EXIF original capture datetime."""
    raw = read_exif_datetime_original(path)
    if raw is None:
        return None
    dt = parse_date(raw)
    if dt is None:
        logger.debug("unparseable DateTimeOriginal %r in %s", raw, path)
    return dt
