# vkeys/core/__init__.py
"""Public facade for vkeys.core: re-export the engine classes from CamelCase modules.

Keeps the CamelCase file names (BindingTable.py, KeyCodes.py, ...),
but provides flat imports for convenience and stability.
"""

# Re-export classes/symbols from CamelCase modules
from .BindingTable import BindingState, BindingTable  # noqa: F401
from .Errors import (  # noqa: F401
    BindingConflictError,
    CorruptDefaultsError,
    InvalidKeyCodeError,
    KeyBindingError,
    KeyConfigStorageError,
)
from .InputReader import InputReader, KeyCommand  # noqa: F401
from .KeyCodes import KeyCodeModel, KeyRange  # noqa: F401
from .KeyConfig import KeyConfig, LoadReport  # noqa: F401
from .VirtualKeys import KeySignal, MenuEntry, VirtualKey  # noqa: F401


__all__ = [
    "BindingConflictError",
    "BindingState",
    "BindingTable",
    "CorruptDefaultsError",
    "InputReader",
    "InvalidKeyCodeError",
    "KeyBindingError",
    "KeyCodeModel",
    "KeyCommand",
    "KeyConfig",
    "KeyConfigStorageError",
    "KeyRange",
    "KeySignal",
    "LoadReport",
    "MenuEntry",
    "VirtualKey",
]
