"""Pytest configuration and fixtures for component-txn tests."""

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
import structlog

from component_txn.core.notifications import Notification, collecting_handler
from component_txn.fs.prefix import InstallPrefix
from component_txn.fs.temp import TempStorage
from component_txn.fs.transaction import Transaction


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Undo logging configuration made by CLI commands."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def install_root(tmp_path: Path) -> Path:
    """Empty install prefix directory."""
    root = tmp_path / "prefix"
    root.mkdir()
    return root


@pytest.fixture
def temp_storage(tmp_path: Path) -> TempStorage:
    """Backup storage on the same volume as the install root."""
    return TempStorage(tmp_path / "backups")


@pytest.fixture
def events() -> tuple[Callable[[Notification], None], list[Notification]]:
    """Notification handler that records every event."""
    return collecting_handler()


@pytest.fixture
def tx(
    install_root: Path,
    temp_storage: TempStorage,
    events: tuple[Callable[[Notification], None], list[Notification]],
) -> Transaction:
    """Open transaction over ``install_root`` reporting into ``events``."""
    handler, _ = events
    return Transaction(InstallPrefix(install_root), temp_storage, handler)


@pytest.fixture
def snapshot_tree() -> Callable[[Path], dict[str, bytes | None]]:
    """Return a function mapping every path under a root to its bytes.

    Directories map to None.
    """

    def snapshot(root: Path) -> dict[str, bytes | None]:
        tree: dict[str, bytes | None] = {}
        for path in sorted(root.rglob("*")):
            key = path.relative_to(root).as_posix()
            tree[key] = None if path.is_dir() else path.read_bytes()
        return tree

    return snapshot
