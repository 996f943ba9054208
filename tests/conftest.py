from datetime import datetime
from pathlib import Path

import pytest
from PIL import Image

from picobak.metadata import DateOrigin


def write_jpeg(path: Path, date_time_original=None, color="red"):
    """Write a small JPEG, optionally with an EXIF ``DateTimeOriginal``."""
    img = Image.new("RGB", (8, 8), color)
    if date_time_original is None:
        img.save(path, "JPEG")
    else:
        exif = Image.Exif()
        exif[0x8769] = {0x9003: date_time_original}
        img.save(path, "JPEG", exif=exif)
    return path


def fixed_provider(dt):
    """Return a provider list answering ``dt`` for every file."""
    return [(DateOrigin.EXIF, lambda path: dt)]


@pytest.fixture
def library(tmp_path):
    root = tmp_path / "Photos"
    root.mkdir()
    return root


@pytest.fixture
def camera(tmp_path):
    d = tmp_path / "DCIM"
    d.mkdir()
    return d


@pytest.fixture
def feb20():
    return fixed_provider(datetime(2023, 2, 20, 14, 3, 11))
