"""Decide where a picture goes in the library and put it there.

The library layout is ``ROOT/YYYY/MM/DD/<name>``. When a different file
already sits at the destination the copy gets a ``_1``, ``_2``... suffix
before the extension; when an identical file is there, nothing is copied.

Planning (:func:`plan_placement`) only reads the filesystem. Applying
(:func:`apply_placement`) performs or, under dry-run, describes the exact
same decisions. Within a dry-run batch a :class:`DryRunLedger` stands in
for the writes that were skipped.
"""
import enum
import filecmp
import logging
import shutil
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, Optional, Set

from .errors import DestinationUnwritable, SourceUnreadable
from .utils import display_path

logger = logging.getLogger(__name__)


class Action(enum.Enum):
    COPY = "copy"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class Placement:
    source: Path
    target_dir: Path
    destination: Path
    create_dir: bool
    action: Action


@dataclass
class DryRunLedger:
    """Directories and copies a dry run has pretended to make so far."""

    dirs: Set[Path] = field(default_factory=set)
    files: Dict[Path, Path] = field(default_factory=dict)

    def record(self, placement: Placement):
        if placement.create_dir:
            self.dirs.add(placement.target_dir)
        if placement.action is Action.COPY:
            self.files[placement.destination] = placement.source


def backup_dir_for(root: Path, day: date) -> Path:
    """Return the directory in which a picture taken on ``day`` is saved."""
    return root / f"{day.year:04d}" / f"{day.month:02d}" / f"{day.day:02d}"


def candidate_names(name: str):
    """Yield ``name`` then ``stem_1.ext``, ``stem_2.ext``... forever."""
    p = Path(name)
    yield name
    i = 1
    while True:
        yield f"{p.stem}_{i}{p.suffix}"
        i += 1


def same_content(source: Path, target: Path) -> bool:
    """Byte-compare ``source`` and ``target``."""
    try:
        with open(source, "rb"):
            pass
    except OSError as e:
        raise SourceUnreadable(source, f"cannot open for comparison: {e}") from e
    try:
        return filecmp.cmp(source, target, shallow=False)
    except OSError as e:
        raise DestinationUnwritable(target, f"cannot read existing file: {e}") from e


def plan_placement(source: Path, root: Path, day: date, planned: Optional[DryRunLedger] = None) -> Placement:
    """Work out where ``source`` goes without touching the filesystem.

    Args:
        source: Picture to back up.
        root: Library root.
        day: Capture date of the picture.
        planned: Directories and copies an ongoing dry run pretended to
            make. They are treated as if they were on disk.

    Returns:
        A :class:`Placement`; ``action`` is ``Action.DUPLICATE`` when an
        identical file already exists under the target directory,
        either at the plain name or at one of its suffixed variants.

    Raises:
        DestinationUnwritable: part of the target path exists as a file.
        SourceUnreadable: the source can't be read for comparison.
    """
    if planned is None:
        planned = DryRunLedger()
    target_dir = backup_dir_for(root, day)
    on_disk = target_dir.exists()
    if on_disk and not target_dir.is_dir():
        raise DestinationUnwritable(target_dir, "exists and is not a directory")
    for parent in target_dir.parents:
        if parent == root:
            break
        if parent.exists() and not parent.is_dir():
            raise DestinationUnwritable(parent, "exists and is not a directory")
    create_dir = not on_disk and target_dir not in planned.dirs

    for name in candidate_names(source.name):
        destination = target_dir / name
        planned_source = planned.files.get(destination)
        if planned_source is not None:
            if same_content(source, planned_source):
                return Placement(source, target_dir, destination, False, Action.DUPLICATE)
            continue
        # a dangling symlink still takes the name
        if not on_disk or not (destination.exists() or destination.is_symlink()):
            return Placement(source, target_dir, destination, create_dir, Action.COPY)
        if destination.is_file() and same_content(source, destination):
            return Placement(source, target_dir, destination, False, Action.DUPLICATE)


def _copy_bytes(src: Path, dst: Path):
    try:
        src_file = open(src, "rb")
    except OSError as e:
        raise SourceUnreadable(src, f"cannot open: {e}") from e
    with src_file:
        try:
            # exclusive create so a file appearing since planning is never replaced
            dst_file = open(dst, "xb")
        except OSError as e:
            raise DestinationUnwritable(dst, f"cannot create copy: {e}") from e
        with dst_file:
            try:
                shutil.copyfileobj(src_file, dst_file)
            except OSError as e:
                dst_file.close()
                dst.unlink(missing_ok=True)
                raise DestinationUnwritable(dst, f"cannot write copy: {e}") from e


def apply_placement(placement: Placement, dry_run: bool = False, planned: Optional[DryRunLedger] = None) -> Placement:
    """Carry out ``placement``, or print what would happen under dry-run.

    The printed lines are the same in both modes, dry-run just prefixes
    them with ``DRY RUN: would``. Under dry-run, ``planned`` records what
    would have been created so later files of the batch see it.

    Raises:
        DestinationUnwritable: creating the directory or writing the copy
            failed.
        SourceUnreadable: the source vanished or can't be opened.
    """
    src, dst = display_path(placement.source), display_path(placement.destination)
    target_dir = display_path(placement.target_dir)

    if dry_run:
        if placement.create_dir:
            print(f"DRY RUN: would create directory {target_dir}")
        if placement.action is Action.DUPLICATE:
            print(f"DRY RUN: would skip {src}, already backed up as {dst}")
        else:
            print(f"DRY RUN: would copy {src} -> {dst}")
        if planned is not None:
            planned.record(placement)
        return placement

    if placement.create_dir:
        try:
            placement.target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DestinationUnwritable(placement.target_dir, f"cannot create directory: {e}") from e
        print(f"CREATED {target_dir}")

    if placement.action is Action.DUPLICATE:
        print(f"SKIPPED {src}, already backed up as {dst}")
        return placement

    _copy_bytes(placement.source, placement.destination)
    try:
        shutil.copystat(placement.source, placement.destination)
    except OSError as e:
        logger.warning("copied %s but could not copy its timestamps: %s", dst, e)
    print(f"COPIED {src} -> {dst}")
    return placement


def place_file(
        source: Path,
        root: Path,
        day: date,
        dry_run: bool = False,
        planned: Optional[DryRunLedger] = None,
) -> Placement:
    """Plan and apply the placement of ``source`` under ``root``."""
    plan = plan_placement(source, root, day, planned=planned)
    return apply_placement(plan, dry_run=dry_run, planned=planned)
