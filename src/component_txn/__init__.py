"""All-or-nothing file system changes for component installers."""

__version__ = "0.1.0"
