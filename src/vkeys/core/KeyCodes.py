# vkeys/core/KeyCodes.py
"""KeyCodes.py
===============
Description:
-----------------------
Conversion between the three representations of a keyboard key:

- a raw input unit, as delivered by `window.getch()` (a byte of UTF-8 text
  or a curses pseudo-key code),
- an integer key code,
- a canonical key name, as written in the keys configuration file.

Key codes are partitioned into three disjoint ranges:

    ORDINARY   [1, 127]                       single-byte characters
    PSEUDO     [KEY_MIN, KEY_MAX)             curses keys (arrows, F-keys, resize, ...)
    EXTENDED   [KEY_MAX, KEY_MAX + 0x10FFFF]  multi-byte characters, codepoint + KEY_MAX

The range of a code alone decides which lookup path applies. Multi-byte
characters are shifted above KEY_MAX so that no codepoint can collide with
a curses pseudo-key. Only Unicode scalar values are extended codes: surrogates
and values past U+10FFFF are invalid.

Names for the ordinary and pseudo ranges come from `curses.keyname()` and are
cached once when the model is built. A short list of frequently used keys is
renamed to compact forms (TAB, RET, ESC, SPC, UP, ...). Extended codes are
named by the character itself.
"""

import curses
import enum
import logging
from typing import Callable, Optional

from vkeys.core.Errors import InvalidKeyCodeError


logger = logging.getLogger("vkeys")

TAB = 9
RETURN = 10
ESCAPE = 27
SPACE = 32
ORDINARY_MAX = 127

REPLACEMENT_CHARACTER = 0xFFFD
MAX_CODEPOINT = 0x10FFFF
SURROGATES = range(0xD800, 0xE000)

ReadOne = Callable[[], Optional[int]]


class KeyRange(enum.Enum):
    ORDINARY = "ordinary"
    PSEUDO = "pseudo"
    EXTENDED = "extended"


def utf8_length(lead: int) -> int:
    """Return the length of the UTF-8 sequence started by byte *lead*.

    Returns 0 for bytes that cannot start a sequence (continuation bytes,
    overlong leads, values above 0xF4).
    """
    if lead < 0x80:
        return 1
    if 0xC2 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF4:
        return 4
    return 0


# ==================== KeyCodeModel Class ====================
class KeyCodeModel:
    """Class KeyCodeModel
    ======================
    Classifies key codes and converts them to and from key names.

    Build it once at startup and share it: the constructor queries curses for
    every key name in the ordinary and pseudo ranges.

    Attributes:
        key_min (int): First code of the pseudo-key range (curses.KEY_MIN).
        key_max (int): First code of the extended range (curses.KEY_MAX).
    """

    def __init__(
        self,
        keyname: Optional[Callable[[int], bytes | str]] = None,
        key_min: Optional[int] = None,
        key_max: Optional[int] = None,
    ):
        """Builds the cached key name table.

        Args:
            keyname: Function returning the terminal name of a key code.
                Defaults to `curses.keyname`.
            key_min: Override for `curses.KEY_MIN`.
            key_max: Override for `curses.KEY_MAX`.
        """
        self.key_min: int = curses.KEY_MIN if key_min is None else key_min
        self.key_max: int = curses.KEY_MAX if key_max is None else key_max
        self._keyname = keyname or curses.keyname

        self._keynames: list[str] = [""] * self.key_max
        self._codes_by_name: dict[str, int] = {}
        self._build_keynames()

    # ---------------------- Name table --------------------
    def _query_keyname(self, code: int) -> str:
        try:
            raw = self._keyname(code)
        except (ValueError, curses.error):
            return ""
        if raw is None:
            return ""
        if isinstance(raw, bytes):
            return raw.decode("ascii", "replace")
        return str(raw)

    def _short_forms(self) -> dict[int, str]:
        forms = {
            TAB: "TAB",
            RETURN: "RET",
            ESCAPE: "ESC",
            SPACE: "SPC",
            curses.KEY_UP: "UP",
            curses.KEY_DOWN: "DWN",
            curses.KEY_LEFT: "LFT",
            curses.KEY_RIGHT: "RGT",
            curses.KEY_HOME: "HOM",
            curses.KEY_END: "END",
            curses.KEY_NPAGE: "PgD",
            curses.KEY_PPAGE: "PgU",
            curses.KEY_IC: "INS",
            curses.KEY_DC: "DEL",
        }
        forms.update({curses.KEY_F0 + i: f"F{i}" for i in range(1, 13)})
        return forms

    def _build_keynames(self) -> None:
        for code in range(1, ORDINARY_MAX + 1):
            self._keynames[code] = self._query_keyname(code)
        for code in range(self.key_min, self.key_max):
            self._keynames[code] = self._query_keyname(code)

        for code, name in self._short_forms().items():
            if 0 < code < self.key_max:
                self._keynames[code] = name

        # Ordinary names win over pseudo names, like a scan in code order.
        for code in range(1, ORDINARY_MAX + 1):
            if self._keynames[code]:
                self._codes_by_name.setdefault(self._keynames[code], code)
        for code in range(self.key_min, self.key_max):
            if self._keynames[code]:
                self._codes_by_name.setdefault(self._keynames[code], code)

        logger.debug("Key name table built with %d names.", len(self._codes_by_name))

    def _legacy_aliases(self) -> dict[str, int]:
        # Spellings written by older releases of the keys file.
        return {
            "^J": RETURN,
            "KEY_HOME": curses.KEY_HOME,
            "KEY_END": curses.KEY_END,
        }

    # ---------------------- Classification --------------------
    def classify(self, code: int) -> KeyRange:
        """Return the range *code* belongs to.

        Raises:
            InvalidKeyCodeError: If *code* is not a key code (zero, negative,
                or between the ordinary and pseudo ranges, or an extended
                code that is not a Unicode scalar value).
        """
        if 1 <= code <= ORDINARY_MAX:
            return KeyRange.ORDINARY
        if self.key_min <= code < self.key_max:
            return KeyRange.PSEUDO
        if code >= self.key_max:
            codepoint = code - self.key_max
            if codepoint <= MAX_CODEPOINT and codepoint not in SURROGATES:
                return KeyRange.EXTENDED
        raise InvalidKeyCodeError(code)

    def is_valid(self, code: int) -> bool:
        try:
            self.classify(code)
        except InvalidKeyCodeError:
            return False
        return True

    # ---------------------- Conversions --------------------
    def name_of(self, code: int) -> Optional[str]:
        """Return the canonical name of *code*, or None if it has none."""
        try:
            key_range = self.classify(code)
        except InvalidKeyCodeError:
            return None

        if key_range is KeyRange.EXTENDED:
            return chr(code - self.key_max)

        return self._keynames[code] or None

    def code_of(self, name: str) -> int:
        """Return the key code spelled by *name*.

        Never fails: a string that is neither an alias nor a cached name is
        read as text and its first character is mapped to the extended range.
        Such codes may be unreachable from the keyboard (e.g. "foo" maps to
        the extended code of "f"), which leaves the binding inert.
        """
        aliases = self._legacy_aliases()
        if name in aliases:
            return aliases[name]

        code = self._codes_by_name.get(name)
        if code is not None:
            return code

        if not name:
            return self.key_max
        return ord(name[0]) + self.key_max

    def decode_input_unit(self, read_one: ReadOne) -> Optional[int]:
        """Read one key from *read_one* and return its key code.

        Pseudo-keys and single-byte characters are returned as read. Any
        other byte starts a UTF-8 sequence: the continuation bytes are read
        and the decoded codepoint is returned shifted by KEY_MAX.

        Args:
            read_one: Blocking primitive returning one raw input unit, or
                None (or a negative value) when no input is available.

        Returns:
            The key code, or None when the input stream ran dry.
        """
        unit = read_one()
        if unit is None or unit < 0:
            return None

        if unit >= self.key_min:
            return unit
        if unit < 0x80:
            return unit

        length = utf8_length(unit)
        if length < 2:
            logger.debug("decode_input_unit: stray byte 0x%02x", unit)
            return REPLACEMENT_CHARACTER + self.key_max

        buf = bytearray([unit & 0xFF])
        for _ in range(length - 1):
            nxt = read_one()
            if nxt is None or nxt < 0:
                return None
            buf.append(nxt & 0xFF)

        try:
            text = buf.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("decode_input_unit: invalid UTF-8 sequence %r", bytes(buf))
            return REPLACEMENT_CHARACTER + self.key_max
        return ord(text) + self.key_max

    def describe(self, code: int) -> str:
        """Human readable summary of *code*, used by the TTY diagnostics."""
        try:
            key_range = self.classify(code).value
        except InvalidKeyCodeError:
            key_range = "invalid"
        name = self.name_of(code)
        return f"code={code} range={key_range} name={name if name is not None else '-'}"
