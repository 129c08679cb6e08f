# tests/conftest.py
"""Pytest configuration with shared fixtures for the vkeys tests.

The key code model normally asks the terminal library for key names. The
fixtures here replace `curses.keyname` with a table that mimics ncurses, so
every test sees the same names regardless of the terminal it runs in.
"""

from __future__ import annotations

import curses
from typing import Callable, Iterable, Optional, Union
from unittest.mock import MagicMock

import pytest

from vkeys.core.BindingTable import BindingTable
from vkeys.core.KeyCodes import KeyCodeModel


# Pseudo-key names exported by the curses module (KEY_UP, KEY_BTAB, ...).
_PSEUDO_NAMES: dict[int, str] = {}
for _name in sorted(vars(curses)):
    if _name.startswith("KEY_") and _name not in ("KEY_MIN", "KEY_MAX"):
        _code = getattr(curses, _name)
        if isinstance(_code, int):
            _PSEUDO_NAMES.setdefault(_code, _name)


def ncurses_keyname(code: int) -> bytes:
    """Terminal-independent stand-in for `curses.keyname`.

    Control characters are spelled "^@".."^_", DEL is "^?", printable ASCII
    is the character itself and pseudo-keys use their curses constant name.
    """
    if code < 0:
        raise ValueError("invalid key number")
    if code < 32:
        return b"^" + bytes([code + 64])
    if code < 127:
        return bytes([code])
    if code == 127:
        return b"^?"
    return _PSEUDO_NAMES.get(code, "").encode("ascii")


@pytest.fixture
def fake_keyname() -> Callable[[int], bytes]:
    return ncurses_keyname


@pytest.fixture
def model(fake_keyname: Callable[[int], bytes]) -> KeyCodeModel:
    """A key code model built from the fake key name table."""
    return KeyCodeModel(keyname=fake_keyname)


@pytest.fixture
def table(model: KeyCodeModel) -> BindingTable:
    """An empty binding table: every virtual key is MISSING."""
    return BindingTable(model)


@pytest.fixture
def default_table(table: BindingTable) -> BindingTable:
    """A binding table holding the built-in defaults."""
    table.fill_missing()
    return table


def make_reader(units: Iterable[Union[int, str]]) -> Callable[[], Optional[int]]:
    """Return a `read_one` primitive replaying *units*.

    Strings are expanded to their UTF-8 bytes, integers are passed through
    (use them for pseudo-keys). None is returned once the script runs out.
    """
    script: list[int] = []
    for unit in units:
        if isinstance(unit, str):
            script.extend(unit.encode("utf-8"))
        else:
            script.append(unit)
    it = iter(script)

    def read_one() -> Optional[int]:
        return next(it, None)

    return read_one


@pytest.fixture
def scripted() -> Callable[..., Callable[[], Optional[int]]]:
    """Factory fixture: ``scripted("12j")`` or ``scripted(curses.KEY_UP)``."""

    def factory(*units: Union[int, str]) -> Callable[[], Optional[int]]:
        return make_reader(units)

    return factory


@pytest.fixture
def mock_window() -> MagicMock:
    """A curses window stand-in, 24 rows by 80 columns, with no input."""
    window = MagicMock()
    window.getmaxyx.return_value = (24, 80)
    window.getch.return_value = curses.ERR
    return window
