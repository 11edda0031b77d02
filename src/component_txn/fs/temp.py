"""Allocation of temporary backup locations.

Backups made by a transaction live in a ``TempStorage`` area. The storage
hands out unique, not-yet-existing names and owns everything it allocated:
``cleanup()`` reclaims backups that a committed transaction abandoned.
"""

import os
import shutil
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from component_txn.core.constants import (
    BACKUP_DIR_PREFIX,
    BACKUP_FILE_PREFIX,
    BACKUP_ID_LENGTH,
    DEFAULT_TEMP_DIRNAME,
    TEMP_DIR_ENV,
)
from component_txn.core.notifications import (
    Notification,
    NotificationKind,
    NotifyHandler,
    emit,
)
from component_txn.utils.debug import debug

__all__ = ["TempDir", "TempFile", "TempStorage", "resolve_temp_root"]


def resolve_temp_root(
    temp_root: str | Path | None = None,
    default: str | Path | None = None,
) -> Path:
    """Resolve the directory used for temporary backups.

    Args:
        temp_root: Optional explicit directory
        default: Fallback used when neither ``temp_root`` nor the env var is set

    Returns:
        Absolute path; explicit argument first, then ``COMPONENT_TXN_TEMP_DIR``,
        then ``default``, then a directory under the system temp dir.
    """

    chosen: str | Path | None = temp_root
    env_path = os.getenv(TEMP_DIR_ENV)
    if chosen is None and env_path:
        chosen = env_path
    if chosen is None:
        chosen = default
    if chosen is None:
        chosen = Path(tempfile.gettempdir()) / DEFAULT_TEMP_DIRNAME

    return Path(os.path.abspath(Path(chosen).expanduser()))


@dataclass(frozen=True)
class TempFile:
    """Handle to an allocated backup file location (may not exist yet)."""

    path: Path

    def __fspath__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class TempDir:
    """Handle to an allocated, already created backup directory."""

    path: Path

    def join(self, name: str) -> Path:
        return self.path / name

    def __fspath__(self) -> str:
        return str(self.path)


class TempStorage:
    """Hands out unique backup locations under one root directory.

    The root should sit on the same volume as the install prefix so that
    moving a target into a backup is a rename, not a copy.
    """

    def __init__(
        self,
        root: str | Path | None = None,
        notify: NotifyHandler | None = None,
    ) -> None:
        """Initialize temp storage.

        Args:
            root: Directory for backups (see ``resolve_temp_root``)
            notify: Optional handler for cleanup notifications
        """
        self.root = resolve_temp_root(root)
        self._notify = notify
        self._allocated: list[Path] = []
        self._retained: list[Path] = []

    def _ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def _unique_path(self, prefix: str) -> Path:
        while True:
            candidate = self.root / f"{prefix}{uuid.uuid4().hex[:BACKUP_ID_LENGTH]}"
            if not os.path.lexists(candidate):
                return candidate

    def new_backup_file(self) -> TempFile:
        """Allocate a backup file name that does not exist yet."""
        self._ensure_root()
        path = self._unique_path(BACKUP_FILE_PREFIX)
        self._allocated.append(path)
        debug(f"Allocated backup file: {path}")
        return TempFile(path)

    def new_backup_dir(self) -> TempDir:
        """Allocate and create an empty backup directory."""
        self._ensure_root()
        path = self._unique_path(BACKUP_DIR_PREFIX)
        path.mkdir()
        self._allocated.append(path)
        debug(f"Allocated backup directory: {path}")
        return TempDir(path)

    @property
    def allocated(self) -> tuple[Path, ...]:
        """Every location handed out so far, in allocation order."""
        return tuple(self._allocated)

    @property
    def retained(self) -> tuple[Path, ...]:
        """Locations that cleanup() leaves in place."""
        return tuple(self._retained)

    def retain(self, path: Path) -> None:
        """Exclude an allocated location from cleanup.

        Used for backups whose content could not be restored.
        """
        if path in self._allocated and path not in self._retained:
            self._retained.append(path)

    def cleanup(self) -> int:
        """Delete every allocated, non-retained location that still exists.

        Failures are reported as non-fatal notifications.

        Returns:
            Number of locations that could not be removed
        """
        if self._allocated:
            emit(
                self._notify,
                Notification(NotificationKind.TEMP_CLEANUP, path=self.root),
            )

        failures = 0
        for path in reversed(self._allocated):
            if path in self._retained:
                continue
            try:
                if path.is_dir() and not path.is_symlink():
                    shutil.rmtree(path)
                elif os.path.lexists(path):
                    path.unlink()
            except OSError as e:
                failures += 1
                emit(
                    self._notify,
                    Notification(NotificationKind.NON_FATAL_ERROR, path=path, error=e),
                )
        self._allocated = list(self._retained)
        return failures

    def __enter__(self) -> "TempStorage":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.cleanup()
