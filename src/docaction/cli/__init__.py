"""
CLI layer for docaction.

All action logic lives in ``docaction.ops``; this package handles only
terminal transport: argument parsing, coloured output, and tables.

Entry point::

    docaction --help
"""

from docaction.cli.app import app

__all__ = ["app"]
