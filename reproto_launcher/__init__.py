"""
reproto-launcher - keeps a cached reproto binary current and runs it.
"""

__version__ = "0.1.0"
