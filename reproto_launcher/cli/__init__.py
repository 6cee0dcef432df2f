"""
Command-line interface of the reproto launcher.
"""

from reproto_launcher.cli.app import entry_point, main

__all__ = ["main", "entry_point"]
