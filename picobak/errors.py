"""Error kinds reported by picobak.

Every failure that stops a single file from being backed up is a
:class:`BackupError`. The batch driver catches these per file, so one bad
picture never aborts the rest of the list.
"""
from pathlib import Path

from .utils import display_path


class BackupError(Exception):
    """Base class for per-file backup failures."""

    kind = "BackupError"

    def __init__(self, path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.kind}: {display_path(self.path)}: {reason}")


class SourceUnreadable(BackupError):
    kind = "SourceUnreadable"


class MetadataUnavailable(BackupError):
    kind = "MetadataUnavailable"


class DestinationUnwritable(BackupError):
    kind = "DestinationUnwritable"


class InvalidBackupRoot(BackupError):
    kind = "InvalidBackupRoot"


class MetadataProviderError(Exception):
    """A metadata provider failed for a reason other than "no date found"."""
