# vkeys/core/InputReader.py
"""InputReader.py
==================
Turns raw terminal input into resolved commands.

On top of the key decoding done by `KeyCodeModel`, the reader implements the
vi-style command prefix:

    [count]["register]key

- `count` is a decimal number; a leading `0` is not a count but a command
  on its own (it is bound to start-of-week by default). Without digits the
  count is 1.
- `"` followed by `1`-`9` selects registers 1-9, `"` followed by `a`-`z`
  selects registers 10-35. Any other character leaves the default register 0.
- `key` is resolved through the binding table. A terminal resize bypasses the
  table and is reported as `KeySignal.RESIZE`.

When the input stream runs dry at any point the reader returns None instead of
a command.
"""

import curses
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Union

from vkeys.core.KeyCodes import KeyCodeModel, ReadOne
from vkeys.core.VirtualKeys import KeySignal, VirtualKey
from vkeys.utils.logging_config import KEY_LOGGER


if TYPE_CHECKING:
    from vkeys.core.BindingTable import BindingTable


logger = logging.getLogger("vkeys")

REGISTER_PREFIX = ord('"')


@dataclass(frozen=True)
class KeyCommand:
    """A resolved command.

    Attributes:
        action: The bound virtual key, `KeySignal.RESIZE`, or None when the
            key is not bound to anything.
        count: Repeat count, at least 1.
        register: Register index, 0 for the default register.
        code: The key code that was resolved.
    """

    action: Union[VirtualKey, KeySignal, None]
    count: int = 1
    register: int = 0
    code: int = 0


def window_reader(window: Any) -> ReadOne:
    """Adapts a curses window to the "read one raw unit" primitive.

    `window.getch()` reports an empty input queue (or a timeout) as
    `curses.ERR`; the adapter turns that into None.
    """

    def read_one() -> Optional[int]:
        try:
            ch = window.getch()
        except curses.error:
            return None
        if ch == curses.ERR:
            return None
        return ch

    return read_one


# ==================== InputReader Class ====================
class InputReader:
    """Decodes keys and the count/register prefix grammar.

    Attributes:
        model (KeyCodeModel): Shared key code model.
        table (BindingTable): Binding table used for the final lookup.
    """

    def __init__(self, model: KeyCodeModel, table: "BindingTable"):
        self.model = model
        self.table = table

    def read_key(self, read_one: ReadOne) -> Optional[int]:
        """Decode a single key without any prefix handling."""
        code = self.model.decode_input_unit(read_one)
        if code is not None:
            KEY_LOGGER.debug("key %s", self.model.describe(code))
        return code

    def read_command(self, read_one: ReadOne, with_prefix: bool = True) -> Optional[KeyCommand]:
        """Read one command, optionally preceded by a count and a register.

        Args:
            read_one: Blocking primitive returning one raw input unit or None.
            with_prefix: Parse the `[count]["register]` prefix. Without it a
                single key is read and count/register keep their defaults.

        Returns:
            The resolved command, or None if the input ran dry.
        """
        count = 1
        register = 0

        if with_prefix:
            count = 0
            code = self.read_key(read_one)
            while code is not None and (
                (code == ord("0") and count > 0) or ord("1") <= code <= ord("9")
            ):
                count = count * 10 + code - ord("0")
                code = self.read_key(read_one)
            if count == 0:
                count = 1

            if code == REGISTER_PREFIX:
                code = self.read_key(read_one)
                if code is not None:
                    if ord("1") <= code <= ord("9"):
                        register = code - ord("0")
                    elif ord("a") <= code <= ord("z"):
                        register = code - ord("a") + 10
                    code = self.read_key(read_one)
        else:
            code = self.read_key(read_one)

        if code is None:
            logger.debug("read_command: no input available")
            return None

        if code == curses.KEY_RESIZE:
            return KeyCommand(KeySignal.RESIZE, count, register, code)

        return KeyCommand(self.table.lookup(code), count, register, code)
