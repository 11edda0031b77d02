"""Transactional file system operations for component installation.

This module provides a change log over the file system: adds, removes,
moves and in-place modifications are recorded as they happen and undone in
reverse order unless the transaction is committed.
"""

from component_txn.fs.prefix import InstallPrefix, check_relative
from component_txn.fs.temp import TempDir, TempFile, TempStorage
from component_txn.fs.transaction import (
    AddedDir,
    AddedFile,
    ChangeRecord,
    ModifiedFile,
    RemovedDir,
    RemovedFile,
    Transaction,
    invert,
)

__all__ = [
    "AddedDir",
    "AddedFile",
    "ChangeRecord",
    "InstallPrefix",
    "ModifiedFile",
    "RemovedDir",
    "RemovedFile",
    "TempDir",
    "TempFile",
    "TempStorage",
    "Transaction",
    "check_relative",
    "invert",
]
