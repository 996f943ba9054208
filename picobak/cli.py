"""Command-line interface for the ``picobak`` package.

This module exposes the CLI entrypoint used by the console script
``picobak``. It is a thin adapter from parsed arguments to
:mod:`picobak.backup`, so tests can exercise the logic without spawning
subprocesses.
"""
import argparse
import logging
import os
import sys
from pathlib import Path
from importlib.metadata import version

from . import backup as backup_mod
from . import exiftool
from .errors import InvalidBackupRoot

__version__ = version("picobak")

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_BAD_ROOT = 2


def read_paths(stream):
    """Yield one path per non-blank line of ``stream``.

    Byte lines are decoded with :func:`os.fsdecode`, so names that aren't
    valid in the filesystem encoding still reach the right file.
    """
    for line in stream:
        if isinstance(line, bytes):
            line = os.fsdecode(line)
        line = line.rstrip("\r\n")
        if line.strip():
            yield Path(line)


def run(backup_root, file_path=None, dry_run=False, progress=False, stdin=None) -> int:
    """Back up ``file_path`` (or the paths listed on ``stdin``) into ``backup_root``.

    Returns the process exit code.
    """
    root = Path(backup_root)
    try:
        backup_mod.check_backup_root(root)
    except InvalidBackupRoot as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_BAD_ROOT

    if not exiftool.has_exiftool():
        logger.warning(
            "exiftool doesn't seem to be present in $PATH. Install it if you "
            "want to be able to extract more pictures metadata"
        )

    if file_path is not None:
        sources = [Path(file_path)]
    else:
        sources = list(read_paths(stdin if stdin is not None else sys.stdin.buffer))

    stats = backup_mod.backup_files(sources, root, dry_run=dry_run, progress=progress)
    for line in stats.summary_lines():
        print(line, file=sys.stderr)
    return EXIT_OK if stats.ok else EXIT_FAILURES


def build_parser():
    parser = argparse.ArgumentParser(
        prog="picobak",
        description="Backup and organize your pictures library into YEAR/MONTH/DAY folders.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=__version__
    )
    parser.add_argument("backup_root", help="Pictures library directory")
    parser.add_argument(
        "file_path",
        nargs="?",
        help=(
            "Picture to backup. Alternatively, you can send a list of "
            "pictures to backup via stdin, one path per line."
        ),
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help=(
            "Do not create directories or copy files. Print the actions that "
            "would be taken instead. Useful for verification before a real run."
        ),
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar on stderr.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print debug logging, including where each capture date came from.",
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    raise SystemExit(run(
        args.backup_root,
        args.file_path,
        dry_run=args.dry_run,
        progress=args.progress,
    ))
