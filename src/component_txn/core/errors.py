"""Custom exceptions for component-txn.

This module defines the typed exceptions raised by transactional file system
operations. Rollback-time failures are never raised from here; they travel
through the notification channel instead.
"""

from pathlib import Path
from typing import Any


class ComponentTxnError(Exception):
    """Base exception for all component-txn errors.

    All custom exceptions should inherit from this base class to allow
    for broad exception handling when needed.
    """

    pass


class ComponentConflict(ComponentTxnError):
    """Raised when an add/copy/move destination is already occupied.

    Attributes:
        name: Component that attempted the change
        path: Relative path that already exists
    """

    def __init__(self, name: str, path: Path) -> None:
        """Initialize ComponentConflict exception.

        Args:
            name: Component name
            path: Relative path inside the install prefix
        """
        self.name = name
        self.path = Path(path)
        super().__init__(
            f"failed to install component '{name}': "
            f"path already exists: '{self.path}'"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for reports."""
        return {
            "error": "component_conflict",
            "component": self.name,
            "path": str(self.path),
        }

    def __repr__(self) -> str:
        """Return repr string for debugging."""
        return f"ComponentConflict(name={self.name!r}, path={str(self.path)!r})"


class ComponentMissingFile(ComponentTxnError):
    """Raised when a file to be removed does not exist.

    Attributes:
        name: Component that attempted the removal
        path: Relative path that is absent
    """

    def __init__(self, name: str, path: Path) -> None:
        self.name = name
        self.path = Path(path)
        super().__init__(
            f"failure removing component '{name}', "
            f"file does not exist: '{self.path}'"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for reports."""
        return {
            "error": "component_missing_file",
            "component": self.name,
            "path": str(self.path),
        }

    def __repr__(self) -> str:
        return f"ComponentMissingFile(name={self.name!r}, path={str(self.path)!r})"


class ComponentMissingDir(ComponentTxnError):
    """Raised when a directory to be removed does not exist.

    Attributes:
        name: Component that attempted the removal
        path: Relative path that is absent
    """

    def __init__(self, name: str, path: Path) -> None:
        self.name = name
        self.path = Path(path)
        super().__init__(
            f"failure removing component '{name}', "
            f"directory does not exist: '{self.path}'"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for reports."""
        return {
            "error": "component_missing_dir",
            "component": self.name,
            "path": str(self.path),
        }

    def __repr__(self) -> str:
        return f"ComponentMissingDir(name={self.name!r}, path={str(self.path)!r})"


class FileOperationError(ComponentTxnError):
    """Raised when a primitive file operation fails.

    The underlying ``OSError`` is chained as ``__cause__``.

    Attributes:
        operation: Primitive that failed (e.g. 'rename_file', 'copy_dir')
        path: Absolute path the operation was acting on
        what: Label of the subsystem requesting the operation
        reason: String form of the underlying error
    """

    def __init__(
        self,
        operation: str,
        path: Path,
        what: str = "component",
        reason: str | None = None,
    ) -> None:
        self.operation = operation
        self.path = Path(path)
        self.what = what
        self.reason = reason

        message = f"{what}: {operation} failed for '{self.path}'"
        if reason:
            message += f": {reason}"

        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for reports."""
        result: dict[str, Any] = {
            "error": "file_operation_failed",
            "operation": self.operation,
            "path": str(self.path),
            "what": self.what,
        }

        if self.reason is not None:
            result["reason"] = self.reason

        return result

    def __repr__(self) -> str:
        return (
            f"FileOperationError(operation={self.operation!r}, "
            f"path={str(self.path)!r}, "
            f"what={self.what!r})"
        )


class TransactionClosed(ComponentTxnError):
    """Raised when a committed or rolled-back transaction is used again."""

    def __init__(self, state: str) -> None:
        self.state = state
        super().__init__(f"transaction is already {state}")

    def to_dict(self) -> dict[str, Any]:
        return {"error": "transaction_closed", "state": self.state}
