"""Install-prefix path resolution.

Every path handed to a transaction is relative to the install prefix. This
module turns those relative paths into absolute ones without touching the
file system.
"""

import os
from dataclasses import dataclass
from pathlib import Path, PurePath


def check_relative(relpath: str | PurePath) -> Path:
    """Validate that a path is relative and non-empty.

    Args:
        relpath: Path supplied by the caller

    Returns:
        The path as a ``Path``

    Raises:
        ValueError: If the path is empty or absolute
    """
    if str(relpath) == "":
        raise ValueError("relative path must not be empty")

    path = Path(relpath)
    if path.is_absolute() or path.anchor:
        raise ValueError(f"path must be relative to the install prefix: '{path}'")
    if path == Path("."):
        raise ValueError("relative path must not be empty")

    return path


@dataclass(frozen=True)
class InstallPrefix:
    """Base directory against which relative component paths are resolved."""

    root: Path

    def __post_init__(self) -> None:
        root = Path(self.root).expanduser()
        if not root.is_absolute():
            root = Path(os.path.abspath(root))

        object.__setattr__(self, "root", root)

    def abs_path(self, relpath: str | PurePath) -> Path:
        """Resolve a relative path against the prefix root.

        Args:
            relpath: Relative path inside the prefix

        Returns:
            Absolute path; deterministic and side-effect free
        """
        return self.root / check_relative(relpath)

    def __str__(self) -> str:
        return str(self.root)
