"""Back up pictures one by one and keep score.

:func:`backup_file` handles a single picture from start to finish.
:func:`backup_files` runs it over a list, recording failures instead of
stopping, so the exit status can reflect the whole batch.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from tqdm import tqdm

from . import metadata, placement
from .errors import BackupError, InvalidBackupRoot, SourceUnreadable
from .metadata import DateOrigin
from .placement import Action

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackupResult:
    source: Path
    destination: Path
    action: Action
    origin: DateOrigin


@dataclass(frozen=True)
class BackupFailure:
    source: Path
    error: BackupError


@dataclass
class BackupStats:
    duplicates: int = 0
    copied: dict = field(default_factory=lambda: {o: 0 for o in DateOrigin})
    failures: List[BackupFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def total_copied(self) -> int:
        return sum(self.copied.values())

    def record(self, result: BackupResult):
        if result.action is Action.DUPLICATE:
            self.duplicates += 1
        else:
            self.copied[result.origin] += 1

    def summary_lines(self) -> List[str]:
        lines = [
            "Backup Statistics:",
            "==================",
            f"Duplicates: {self.duplicates}",
            f"Copied: {self.total_copied}",
            "To classify these newly copied files, we used:",
        ]
        for origin in DateOrigin:
            lines.append(f"   {self.copied[origin]}: {origin.value}")
        lines.append(f"Failures: {len(self.failures)}")
        if self.failures:
            lines.append("")
            lines.append("WARNING: unable to backup some files:")
            lines.extend(str(f.error) for f in self.failures)
        return lines


def check_backup_root(root: Path):
    """Raise :class:`InvalidBackupRoot` unless ``root`` is an existing directory."""
    if not root.exists():
        raise InvalidBackupRoot(root, "does not exist")
    if not root.is_dir():
        raise InvalidBackupRoot(root, "is not a directory")


def check_source(path: Path):
    """Raise :class:`SourceUnreadable` unless ``path`` is a readable file."""
    if not path.is_file():
        raise SourceUnreadable(path, "is not a file")
    try:
        with open(path, "rb"):
            pass
    except OSError as e:
        raise SourceUnreadable(path, f"cannot open: {e}") from e


def backup_file(
        source: Path,
        root: Path,
        dry_run: bool = False,
        providers=None,
        mtime_func: Optional[Callable[[Path], float]] = None,
        planned: Optional[placement.DryRunLedger] = None,
) -> BackupResult:
    """Back up a single picture into ``root``.

    Raises:
        BackupError: any of its subclasses, for this file only.
    """
    check_source(source)
    stamp = metadata.resolve_capture_date(source, providers=providers, mtime_func=mtime_func)
    done = placement.place_file(
        source, root, stamp.date, dry_run=dry_run, planned=planned)
    return BackupResult(source, done.destination, done.action, stamp.origin)


def backup_files(
        sources: Iterable[Path],
        root: Path,
        dry_run: bool = False,
        progress: bool = False,
        providers=None,
        mtime_func: Optional[Callable[[Path], float]] = None,
) -> BackupStats:
    """Back up every path in ``sources``; failures don't stop the batch.

    A dry run remembers what it would have created, so its trace matches
    a real run over the same list.
    """
    stats = BackupStats()
    planned = placement.DryRunLedger() if dry_run else None
    for source in tqdm(list(sources), disable=not progress):
        source = Path(source)
        try:
            result = backup_file(
                source,
                root,
                dry_run=dry_run,
                providers=providers,
                mtime_func=mtime_func,
                planned=planned,
            )
        except BackupError as e:
            logger.debug("backup of %s failed: %s", source, e)
            stats.failures.append(BackupFailure(source, e))
            continue
        stats.record(result)
    return stats
