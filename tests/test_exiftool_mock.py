"""exiftool wrapper tests with ``subprocess.run`` replaced."""
import json
from datetime import datetime
from types import SimpleNamespace

import pytest

from picobak import exiftool
from picobak.errors import MetadataProviderError


def _fake_run(stdout="", returncode=0, stderr=""):
    calls = []

    def run(cmd, **kwargs):
        calls.append(cmd)
        return SimpleNamespace(stdout=stdout, returncode=returncode, stderr=stderr)

    return run, calls


def test_prefers_date_time_original(monkeypatch):
    out = json.dumps([{
        "SourceFile": "/tmp/clip.mov",
        "CreateDate": "2019:07:04 10:00:00",
        "DateTimeOriginal": "2019:07:03 09:00:00",
    }])
    run, calls = _fake_run(out)
    monkeypatch.setattr(exiftool, "has_exiftool", lambda: True)
    monkeypatch.setattr(exiftool.subprocess, "run", run)

    dt = exiftool.capture_date_from_exiftool("/tmp/clip.mov")
    assert dt == datetime(2019, 7, 3, 9, 0, 0)
    assert calls[0][:3] == ["exiftool", "-j", "-P"]
    assert calls[0][-1] == "/tmp/clip.mov"


def test_falls_back_to_create_date(monkeypatch):
    out = json.dumps([{"SourceFile": "/tmp/clip.mov", "CreateDate": "2019:07:04 10:00:00"}])
    run, _ = _fake_run(out)
    monkeypatch.setattr(exiftool, "has_exiftool", lambda: True)
    monkeypatch.setattr(exiftool.subprocess, "run", run)
    assert exiftool.capture_date_from_exiftool("/tmp/clip.mov").day == 4


def test_no_date_tags_returns_none(monkeypatch):
    run, _ = _fake_run(json.dumps([{"SourceFile": "/tmp/a.bin"}]))
    monkeypatch.setattr(exiftool, "has_exiftool", lambda: True)
    monkeypatch.setattr(exiftool.subprocess, "run", run)
    assert exiftool.capture_date_from_exiftool("/tmp/a.bin") is None


def test_unsupported_file_is_not_found(monkeypatch):
    run, _ = _fake_run("", returncode=1, stderr="Error: Unknown file type")
    monkeypatch.setattr(exiftool, "has_exiftool", lambda: True)
    monkeypatch.setattr(exiftool.subprocess, "run", run)
    assert exiftool.read_date_tags("/tmp/a.bin") == {}


def test_missing_binary_is_not_found(monkeypatch):
    monkeypatch.setattr(exiftool, "has_exiftool", lambda: False)
    assert exiftool.capture_date_from_exiftool("/tmp/a.jpg") is None


def test_garbage_output_raises(monkeypatch):
    run, _ = _fake_run("this is not json")
    monkeypatch.setattr(exiftool, "has_exiftool", lambda: True)
    monkeypatch.setattr(exiftool.subprocess, "run", run)
    with pytest.raises(MetadataProviderError):
        exiftool.read_date_tags("/tmp/a.jpg")


def test_unexpected_json_shape_raises(monkeypatch):
    run, _ = _fake_run(json.dumps({"CreateDate": "2019:07:04 10:00:00"}))
    monkeypatch.setattr(exiftool, "has_exiftool", lambda: True)
    monkeypatch.setattr(exiftool.subprocess, "run", run)
    with pytest.raises(MetadataProviderError):
        exiftool.read_date_tags("/tmp/a.jpg")


def test_spawn_failure_raises(monkeypatch):
    def run(cmd, **kwargs):
        raise PermissionError("exiftool: permission denied")

    monkeypatch.setattr(exiftool, "has_exiftool", lambda: True)
    monkeypatch.setattr(exiftool.subprocess, "run", run)
    with pytest.raises(MetadataProviderError):
        exiftool.read_date_tags("/tmp/a.jpg")
