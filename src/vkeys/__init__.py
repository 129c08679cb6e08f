# vkeys/__init__.py
"""vkeys: configurable key bindings for curses applications."""

__version__ = "0.1.0"
