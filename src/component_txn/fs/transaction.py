"""Transactional file system changes for installing components.

Installation or uninstallation of a single component happens inside a
``Transaction``. Each operation performs its file system mutation and then
records a ``ChangeRecord`` describing how to undo it. If the transaction is
left without ``commit()`` every recorded change is undone in reverse order.

Instead of deleting or overwriting files, old copies are moved into the
``TempStorage`` area. On rollback they are moved back into place; on commit
they are abandoned to the storage's own cleanup.

Intermediate directories created while placing a file are not recorded and
therefore survive a rollback.

Usage:
    with TempStorage(temp_root) as temp:
        with Transaction(InstallPrefix(root), temp) as tx:
            tx.write_file("rustc", "bin/rustc", content)
            tx.remove_file("rustc", "bin/old-tool")
            tx.commit()

Leaving the ``with`` block without ``commit()`` (normally or through an
exception) rolls back. Backups that could not be restored are retained by
the storage, so its cleanup on exit leaves them in place. Callers that
cannot use ``with`` must call ``rollback()`` themselves; dropping the object
does not undo anything.
"""

from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Any, BinaryIO, assert_never

from component_txn.core.constants import BACKUP_DIR_CHILD, COMPONENT_LABEL
from component_txn.core.errors import (
    ComponentConflict,
    ComponentMissingDir,
    ComponentMissingFile,
    TransactionClosed,
)
from component_txn.core.notifications import (
    Notification,
    NotificationKind,
    NotifyHandler,
    emit,
    structlog_handler,
)
from component_txn.fs import primitives
from component_txn.fs.prefix import InstallPrefix, check_relative
from component_txn.fs.temp import TempDir, TempFile, TempStorage

__all__ = [
    "AddedDir",
    "AddedFile",
    "ChangeRecord",
    "ModifiedFile",
    "RemovedDir",
    "RemovedFile",
    "Transaction",
    "invert",
]


@dataclass(frozen=True)
class AddedFile:
    """A file that did not exist before was placed at ``path``."""

    path: Path


@dataclass(frozen=True)
class AddedDir:
    """A directory tree that did not exist before was placed at ``path``."""

    path: Path


@dataclass(frozen=True)
class RemovedFile:
    """The file at ``path`` was moved into ``backup``."""

    path: Path
    backup: TempFile


@dataclass(frozen=True)
class RemovedDir:
    """The directory at ``path`` was moved under ``backup``."""

    path: Path
    backup: TempDir


@dataclass(frozen=True)
class ModifiedFile:
    """The file at ``path`` may be rewritten by the caller.

    ``backup`` holds the original bytes, or is None if no file existed.
    """

    path: Path
    backup: TempFile | None


ChangeRecord = AddedFile | AddedDir | RemovedFile | RemovedDir | ModifiedFile


def invert(
    record: ChangeRecord,
    prefix: InstallPrefix,
    notify: NotifyHandler | None = None,
) -> None:
    """Undo a single recorded change.

    Raises:
        FileOperationError: If the underlying primitive fails
    """
    match record:
        case AddedFile(path=path):
            primitives.remove_file(COMPONENT_LABEL, prefix.abs_path(path))
        case AddedDir(path=path):
            primitives.remove_dir(COMPONENT_LABEL, prefix.abs_path(path), notify)
        case RemovedFile(path=path, backup=backup) | ModifiedFile(
            path=path, backup=TempFile() as backup
        ):
            primitives.rename_file(
                COMPONENT_LABEL, backup.path, prefix.abs_path(path), notify
            )
        case RemovedDir(path=path, backup=backup):
            primitives.rename_dir(
                COMPONENT_LABEL,
                backup.join(BACKUP_DIR_CHILD),
                prefix.abs_path(path),
                notify,
            )
        case ModifiedFile(path=path, backup=None):
            abs_path = prefix.abs_path(path)
            if primitives.is_file(abs_path):
                primitives.remove_file(COMPONENT_LABEL, abs_path)
        case _:
            assert_never(record)


class Transaction:
    """Tracks file system changes so they can be rolled back.

    All operations that create files create any missing intermediate
    directories, and fail if the destination already exists.
    """

    def __init__(
        self,
        prefix: InstallPrefix | str | Path,
        temp: TempStorage,
        notify: NotifyHandler | None = None,
    ) -> None:
        """Initialize an empty transaction.

        Args:
            prefix: Install prefix (or its root directory)
            temp: Storage that allocates backup locations
            notify: Notification handler; defaults to structlog logging
        """
        if not isinstance(prefix, InstallPrefix):
            prefix = InstallPrefix(Path(prefix))
        self.prefix = prefix
        self.temp = temp
        self.notify_handler: NotifyHandler = notify or structlog_handler()
        self.committed = False
        self.rollback_errors = 0
        self._changes: list[ChangeRecord] = []
        self._closed: str | None = None

    @property
    def changes(self) -> tuple[ChangeRecord, ...]:
        """Recorded changes in chronological order."""
        return tuple(self._changes)

    @property
    def closed(self) -> bool:
        return self._closed is not None

    def _check_open(self) -> None:
        if self._closed is not None:
            raise TransactionClosed(self._closed)

    def _change(self, item: ChangeRecord) -> None:
        self._changes.append(item)

    def _dest_abs_path(self, component: str, relpath: Path) -> Path:
        abs_path = self.prefix.abs_path(relpath)
        if primitives.path_exists(abs_path):
            raise ComponentConflict(component, relpath)
        primitives.ensure_dir_exists(COMPONENT_LABEL, abs_path.parent)
        return abs_path

    def add_file(self, component: str, relpath: str | PurePath) -> BinaryIO:
        """Add an empty file at a path relative to the install prefix.

        Returns:
            Binary handle for writing the contents; the caller closes it.
        """
        relpath = check_relative(relpath)
        self._check_open()
        abs_path = self._dest_abs_path(component, relpath)
        handle = primitives.create_file(COMPONENT_LABEL, abs_path)
        self._change(AddedFile(relpath))
        return handle

    def write_file(self, component: str, relpath: str | PurePath, content: str) -> None:
        """Create a new file with string contents."""
        relpath = check_relative(relpath)
        with self.add_file(component, relpath) as handle:
            primitives.write_str(
                COMPONENT_LABEL, handle, self.prefix.abs_path(relpath), content
            )

    def copy_file(
        self, component: str, relpath: str | PurePath, src: str | Path
    ) -> None:
        """Copy a file to a relative path of the install prefix."""
        relpath = check_relative(relpath)
        self._check_open()
        abs_path = self._dest_abs_path(component, relpath)
        primitives.copy_file(Path(src), abs_path, COMPONENT_LABEL)
        self._change(AddedFile(relpath))

    def copy_dir(
        self, component: str, relpath: str | PurePath, src: str | Path
    ) -> None:
        """Recursively copy a directory to a relative path of the install prefix."""
        relpath = check_relative(relpath)
        self._check_open()
        abs_path = self._dest_abs_path(component, relpath)
        primitives.copy_dir(Path(src), abs_path, COMPONENT_LABEL)
        self._change(AddedDir(relpath))

    def move_file(
        self, component: str, relpath: str | PurePath, src: str | Path
    ) -> None:
        """Move a file to a relative path of the install prefix."""
        relpath = check_relative(relpath)
        self._check_open()
        abs_path = self._dest_abs_path(component, relpath)
        primitives.rename_file(
            COMPONENT_LABEL, Path(src), abs_path, self.notify_handler
        )
        self._change(AddedFile(relpath))

    def move_dir(
        self, component: str, relpath: str | PurePath, src: str | Path
    ) -> None:
        """Recursively move a directory to a relative path of the install prefix."""
        relpath = check_relative(relpath)
        self._check_open()
        abs_path = self._dest_abs_path(component, relpath)
        primitives.rename_dir(
            COMPONENT_LABEL, Path(src), abs_path, self.notify_handler
        )
        self._change(AddedDir(relpath))

    def remove_file(self, component: str, relpath: str | PurePath) -> None:
        """Remove a file, keeping its bytes in a backup for rollback."""
        relpath = check_relative(relpath)
        self._check_open()
        abs_path = self.prefix.abs_path(relpath)
        if not primitives.path_exists(abs_path):
            raise ComponentMissingFile(component, relpath)
        backup = self.temp.new_backup_file()
        primitives.rename_file(
            COMPONENT_LABEL, abs_path, backup.path, self.notify_handler
        )
        self._change(RemovedFile(relpath, backup))

    def remove_dir(self, component: str, relpath: str | PurePath) -> None:
        """Recursively remove a directory, keeping it in a backup for rollback."""
        relpath = check_relative(relpath)
        self._check_open()
        abs_path = self.prefix.abs_path(relpath)
        if not primitives.path_exists(abs_path):
            raise ComponentMissingDir(component, relpath)
        backup = self.temp.new_backup_dir()
        primitives.rename_dir(
            COMPONENT_LABEL,
            abs_path,
            backup.join(BACKUP_DIR_CHILD),
            self.notify_handler,
        )
        self._change(RemovedDir(relpath, backup))

    def modify_file(self, relpath: str | PurePath) -> None:
        """Prepare a path for arbitrary rewriting after this call returns.

        If a file exists it is copied to a backup and left in place for the
        caller to overwrite. Otherwise the parent directories are created so
        the caller can create the file, and rollback deletes it.
        """
        relpath = check_relative(relpath)
        self._check_open()
        abs_path = self.prefix.abs_path(relpath)

        if primitives.is_file(abs_path):
            backup = self.temp.new_backup_file()
            primitives.copy_file(abs_path, backup.path, COMPONENT_LABEL)
            self._change(ModifiedFile(relpath, backup))
        else:
            primitives.ensure_dir_exists(COMPONENT_LABEL, abs_path.parent)
            self._change(ModifiedFile(relpath, None))

    def commit(self) -> None:
        """Make every recorded change permanent.

        Must be called for all successful transactions. Backups are left to
        the temp storage's cleanup.
        """
        self._check_open()
        self.committed = True
        self._closed = "committed"
        self._changes.clear()

    def rollback(self) -> int:
        """Undo every recorded change, newest first.

        A failing inversion is reported as a non-fatal notification and the
        remaining changes are still undone. Never raises.

        Returns:
            Number of changes that could not be undone
        """
        if self._closed is not None:
            return 0

        self._closed = "rolled back"
        emit(
            self.notify_handler,
            Notification(NotificationKind.ROLLING_BACK, path=self.prefix.root),
        )

        failures = 0
        for item in reversed(self._changes):
            try:
                invert(item, self.prefix, self.notify_handler)
            except Exception as e:  # noqa: BLE001
                failures += 1
                backup = getattr(item, "backup", None)
                if backup is not None:
                    self.temp.retain(backup.path)
                emit(
                    self.notify_handler,
                    Notification(
                        NotificationKind.NON_FATAL_ERROR,
                        path=self.prefix.abs_path(item.path),
                        error=e,
                        detail=type(item).__name__,
                    ),
                )

        emit(
            self.notify_handler,
            Notification(
                NotificationKind.ROLLBACK_FINISHED,
                path=self.prefix.root,
                detail=f"{len(self._changes)} changes, {failures} failed",
            ),
        )
        self.rollback_errors = failures
        self._changes.clear()
        return failures

    def __enter__(self) -> "Transaction":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if not self.committed:
            self.rollback()

    def __repr__(self) -> str:
        return (
            f"Transaction(prefix={str(self.prefix)!r}, "
            f"changes={len(self._changes)}, "
            f"committed={self.committed})"
        )
