"""CLI entrypoints for component-txn."""

from component_txn.cli.apply import app as apply_app

__all__ = ["apply_app"]
