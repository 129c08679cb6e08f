# vkeys/core/Errors.py
"""Errors.py
=============
Exception types raised by the key-binding engine.

Only two of them are expected during normal interactive use:
`BindingConflictError` is raised when a key is already taken and is meant to be
reported by the key configuration menu. `CorruptDefaultsError` and
`KeyConfigStorageError` describe packaging or installation defects and abort
startup.
"""

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from vkeys.core.VirtualKeys import VirtualKey


class KeyBindingError(Exception):
    """Base class for all key-binding engine errors."""


class InvalidKeyCodeError(KeyBindingError, ValueError):
    """A key code outside the ordinary, pseudo and extended ranges."""

    def __init__(self, code: int):
        super().__init__(f"Invalid key code: {code}")
        self.code = code


class BindingConflictError(KeyBindingError):
    """The key is already bound to a virtual key.

    Attributes:
        code (int): The key code that could not be assigned.
        owner (VirtualKey): The virtual key currently holding the code.
    """

    def __init__(self, code: int, owner: "VirtualKey", key_name: str | None = None):
        shown = key_name if key_name else str(code)
        super().__init__(f"Key {shown!r} is already bound to {owner.label!r}")
        self.code = code
        self.owner = owner
        self.key_name = key_name


class CorruptDefaultsError(KeyBindingError):
    """A built-in default binding conflicts with another default.

    Attributes:
        vkey (VirtualKey): The action whose defaults could not be assigned.
        index (int): Ordinal of that action in the built-in table.
    """

    def __init__(self, vkey: "VirtualKey", conflict: BindingConflictError):
        super().__init__(
            f"Default key bindings for {vkey.label!r} (#{int(vkey)}) are corrupt: {conflict}"
        )
        self.vkey = vkey
        self.index = int(vkey)
        self.conflict = conflict


class KeyConfigStorageError(KeyBindingError):
    """The keys configuration file could not be created or written."""
