"""Primitive file operations with classified errors.

Each mutating primitive either succeeds or raises ``FileOperationError``
naming the operation and path, with the original ``OSError`` chained.
Renames never fall back to copy+delete; callers are expected to keep the
source and destination on the same volume.
"""

import os
import shutil
from pathlib import Path
from typing import BinaryIO

from component_txn.core.errors import FileOperationError
from component_txn.core.notifications import (
    Notification,
    NotificationKind,
    NotifyHandler,
    emit,
)
from component_txn.utils.debug import debug

__all__ = [
    "copy_dir",
    "copy_file",
    "create_file",
    "ensure_dir_exists",
    "is_dir",
    "is_file",
    "path_exists",
    "remove_dir",
    "remove_file",
    "rename_dir",
    "rename_file",
    "write_str",
]


def path_exists(path: Path) -> bool:
    """Return True if anything, including a dangling symlink, is at ``path``."""
    return os.path.lexists(path)


def is_file(path: Path) -> bool:
    return Path(path).is_file()


def is_dir(path: Path) -> bool:
    return Path(path).is_dir()


def ensure_dir_exists(
    what: str, path: Path, notify: NotifyHandler | None = None
) -> None:
    """Create ``path`` and any missing parents.

    Raises:
        FileOperationError: If the directory cannot be created
    """
    path = Path(path)
    if path.is_dir():
        return

    emit(notify, Notification(NotificationKind.CREATING_DIRECTORY, path=path))
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileOperationError("create_dir", path, what, str(e)) from e
    debug(f"Created directory: {path}")


def create_file(what: str, path: Path) -> BinaryIO:
    """Create a new empty file and return it open for binary writing.

    Creation is exclusive: an existing file at ``path`` is an error.
    """
    try:
        handle = open(path, "xb")
    except OSError as e:
        raise FileOperationError("create_file", path, what, str(e)) from e
    debug(f"Created file: {path}")
    return handle


def write_str(what: str, handle: BinaryIO, path: Path, content: str) -> None:
    """Write ``content`` as UTF-8 to an open handle and flush it."""
    try:
        handle.write(content.encode("utf-8"))
        handle.flush()
    except OSError as e:
        raise FileOperationError("write_file", path, what, str(e)) from e


def copy_file(src: Path, dst: Path, what: str = "component") -> None:
    """Copy a single file, preserving metadata and not following symlinks."""
    try:
        shutil.copy2(str(src), str(dst), follow_symlinks=False)
    except OSError as e:
        raise FileOperationError("copy_file", src, what, f"to '{dst}': {e}") from e
    debug(f"Copied file: {src} -> {dst}")


def copy_dir(src: Path, dst: Path, what: str = "component") -> None:
    """Recursively copy a directory tree; ``dst`` must not exist."""
    try:
        shutil.copytree(str(src), str(dst), symlinks=True)
    except (OSError, shutil.Error) as e:
        raise FileOperationError("copy_dir", src, what, f"to '{dst}': {e}") from e
    debug(f"Copied directory: {src} -> {dst}")


def rename_file(
    what: str, src: Path, dst: Path, notify: NotifyHandler | None = None
) -> None:
    """Rename a file in place."""
    emit(
        notify,
        Notification(NotificationKind.RENAMING_FILE, path=Path(src), detail=str(dst)),
    )
    try:
        os.rename(src, dst)
    except OSError as e:
        raise FileOperationError("rename_file", src, what, f"to '{dst}': {e}") from e
    debug(f"Renamed file: {src} -> {dst}")


def rename_dir(
    what: str, src: Path, dst: Path, notify: NotifyHandler | None = None
) -> None:
    """Rename a directory tree in place."""
    emit(
        notify,
        Notification(
            NotificationKind.RENAMING_DIRECTORY, path=Path(src), detail=str(dst)
        ),
    )
    try:
        os.rename(src, dst)
    except OSError as e:
        raise FileOperationError("rename_dir", src, what, f"to '{dst}': {e}") from e
    debug(f"Renamed directory: {src} -> {dst}")


def remove_file(what: str, path: Path) -> None:
    """Delete a single file or symlink."""
    try:
        os.unlink(path)
    except OSError as e:
        raise FileOperationError("remove_file", path, what, str(e)) from e
    debug(f"Removed file: {path}")


def remove_dir(what: str, path: Path, notify: NotifyHandler | None = None) -> None:
    """Recursively delete a directory tree."""
    emit(notify, Notification(NotificationKind.REMOVING_DIRECTORY, path=Path(path)))
    try:
        if os.path.islink(path):
            os.unlink(path)
        else:
            shutil.rmtree(path)
    except OSError as e:
        raise FileOperationError("remove_dir", path, what, str(e)) from e
    debug(f"Removed directory: {path}")
