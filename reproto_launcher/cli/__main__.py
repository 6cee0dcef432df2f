"""
Entry point for running the launcher CLI as a module.

Usage: python -m reproto_launcher.cli [reproto arguments...]
"""

from .app import entry_point

if __name__ == "__main__":
    entry_point()
