"""Local backup of uploaded images.

After a successful upload the processed file can be copied into the
host's storage area (a note vault, a project folder).  The pipeline only
sees the :class:`BackupStorage` protocol; :class:`LocalBackupStorage` is
the filesystem implementation.

Paths are vault-relative and normalised with :func:`normalize_path`.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol, runtime_checkable

from imagebed.errors import BackupError
from imagebed.models import SourceFile
from imagebed.observability import get_logger

log = get_logger("imagebed.backup")

_SLASHES_RE = re.compile(r"[\\/]+")


@runtime_checkable
class BackupStorage(Protocol):
    """Storage area the backup copy is written to."""

    def ensure_directory(self, path: str) -> None:
        """Create directory *path* (and parents) if it does not exist."""
        ...

    def file_exists(self, path: str) -> bool:
        """Return True if a file exists at *path*."""
        ...

    def write_file(self, path: str, data: bytes) -> None:
        """Create or overwrite the file at *path*."""
        ...


def normalize_path(path: str) -> str:
    """Normalise a vault-relative path.

    Backslashes become forward slashes, repeated separators collapse, and
    leading / trailing separators and whitespace are stripped.

    >>> normalize_path("  attachments//backup/ ")
    'attachments/backup'
    """
    return _SLASHES_RE.sub("/", path.strip()).strip("/")


class LocalBackupStorage:
    """:class:`BackupStorage` rooted at a directory on the local filesystem.

    Parameters
    ----------
    root:
        Directory that every backup path is resolved against.  Paths that
        resolve outside *root* are rejected.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser().resolve()

    def _resolve(self, path: str) -> Path:
        target = (self.root / normalize_path(path)).resolve()
        if not target.is_relative_to(self.root):
            raise BackupError(
                message=f"Backup path escapes the storage root: {path}",
                context={"path": path},
            )
        return target

    def ensure_directory(self, path: str) -> None:
        self._resolve(path).mkdir(parents=True, exist_ok=True)

    def file_exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def write_file(self, path: str, data: bytes) -> None:
        self._resolve(path).write_bytes(data)


def backup_file(storage: BackupStorage, backup_path: str, file: SourceFile) -> str:
    """Write *file* to ``<backup_path>/<file.name>`` in *storage*.

    An existing file of the same name is overwritten.

    Returns
    -------
    str
        The normalised path that was written.

    Raises
    ------
    BackupError
        If the storage raised any error.
    """
    directory = normalize_path(backup_path)
    target = normalize_path(f"{directory}/{file.name}")
    try:
        storage.ensure_directory(directory)
        existed = storage.file_exists(target)
        storage.write_file(target, file.data)
    except BackupError:
        raise
    except Exception as exc:
        raise BackupError(
            message=f"Failed to back up {file.name}: {exc}",
            context={"path": target},
            cause=exc,
        ) from exc

    log.info(
        "Local backup written",
        extra={"extra_fields": {
            "op": "backup", "path": target, "bytes": file.byte_size, "overwritten": existed,
        }},
    )
    return target
