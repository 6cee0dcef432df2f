"""
Entry point for running the reproto launcher as a module.

Usage: python -m reproto_launcher [reproto arguments...]
"""

from reproto_launcher.cli.app import entry_point

if __name__ == "__main__":
    entry_point()
