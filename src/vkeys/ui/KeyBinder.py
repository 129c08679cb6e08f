# vkeys/ui/KeyBinder.py
"""KeyBinder.py
==================
Description:
-----------------------
The KeyBinder class is the application-facing side of the key-binding engine.
It owns the process-wide key state (key code model, binding table) and wires
it to the curses screen: reading commands, drawing the key legend, editing
and persisting bindings, and dispatching virtual keys to application
callbacks.

Key Features:
- Builds the key name table once and shares it with every component.
- Reads commands with the `[count]["register]key` prefix grammar.
- Loads the keys file on startup, creating it from the defaults on the first
  run and filling in missing actions.
- Assigns and removes bindings on behalf of the key configuration menu and
  reports conflicts as exceptions.
- Draws the paged key legend.
- Provides a diagnostic mode that shows raw key codes and their bindings.

Main Methods:
1. resolve_next_command: Reads and resolves the next command from the terminal.
2. load / save: Reads or writes the keys configuration file.
3. assign / remove: Edit bindings by key name or key code.
4. render_legend: Draws one page of the key legend.
5. dispatch: Runs the callback registered for a command's virtual key.
6. debug_tty_input: Displays decoded key codes until ESC is pressed.
"""

import curses
import logging
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, Union

from vkeys.core.BindingTable import BindingTable
from vkeys.core.InputReader import InputReader, KeyCommand, window_reader
from vkeys.core.KeyCodes import ESCAPE, KeyCodeModel
from vkeys.core.KeyConfig import KeyConfig, LoadReport
from vkeys.core.VirtualKeys import KeySignal, VirtualKey
from vkeys.ui.Legend import DEFAULT_CMDS_PER_LINE, LegendCell, LegendEntry, LegendRenderer
from vkeys.utils.utils import get_keys_file_path


KeySpec = Union[str, int]
ActionCallback = Callable[[KeyCommand], Any]


# ==================== KeyBinder Class ====================
class KeyBinder:
    """Class KeyBinder
    ====================
    Owns the key state of the application and connects it to the terminal.

    Attributes:
        stdscr: The curses window keys are read from.
        config (dict): Application configuration (the ``[keys]`` section is used).
        model (KeyCodeModel): Key code classification and naming.
        table (BindingTable): Virtual key <-> key code bindings.
        reader (InputReader): Command prefix parser.
        key_config (KeyConfig): Keys file serializer.
        legend (LegendRenderer): Key legend renderer.
        keys_file (Path): Location of the keys configuration file.
        action_map (dict): Virtual key -> application callback.
    """

    def __init__(
        self,
        stdscr: Any,
        config: Optional[dict[str, Any]] = None,
        model: Optional[KeyCodeModel] = None,
    ):
        logging.debug("KeyBinder initialized with window: %s", stdscr)
        self.stdscr = stdscr
        self.config = config or {}
        keys_section = self.config.get("keys", {})

        self.model = model or KeyCodeModel()
        self.table = BindingTable(self.model)
        self.reader = InputReader(self.model, self.table)
        self.key_config = KeyConfig(self.table)
        self.legend = LegendRenderer(
            self.table, int(keys_section.get("cmds_per_line", DEFAULT_CMDS_PER_LINE))
        )
        self.keys_file: Path = get_keys_file_path(self.config)
        self.action_map: dict[VirtualKey, ActionCallback] = {}

    # ---------------------- Input --------------------
    def resolve_next_command(
        self, with_prefix: bool = True, window: Optional[Any] = None
    ) -> Optional[KeyCommand]:
        """Reads the next command from *window* (default: stdscr).

        Returns:
            KeyCommand | None: The resolved command; its action is None for
            keys bound to nothing. None when no input is available.
        """
        target = window or self.stdscr
        return self.reader.read_command(window_reader(target), with_prefix=with_prefix)

    def wait_for_any_key(self, window: Optional[Any] = None) -> Optional[int]:
        """Blocks until a key is pressed and returns its key code."""
        target = window or self.stdscr
        return self.reader.read_key(window_reader(target))

    # ---------------------- Bindings --------------------
    def _to_code(self, key: KeySpec) -> int:
        if isinstance(key, int):
            return key
        return self.model.code_of(key)

    def assign(self, key: KeySpec, vkey: VirtualKey) -> None:
        """Binds *key* (name or code) to *vkey*.

        Raises:
            BindingConflictError: If the key is already in use.
        """
        self.table.assign(self._to_code(key), vkey)

    def remove(self, key: KeySpec, vkey: VirtualKey) -> None:
        self.table.remove(self._to_code(key), vkey)

    def lookup(self, key: KeySpec) -> Optional[VirtualKey]:
        """Return the virtual key bound to *key* (name or code), or None."""
        return self.table.lookup(self._to_code(key))

    def describe(self, vkey: VirtualKey) -> str:
        """Help text for *vkey*, as shown by the key configuration menu."""
        keys = self.table.all_keys(vkey).rstrip(" ") or "(none)"
        return f"{vkey.label}: {vkey.info} Keys: {keys}"

    # ---------------------- Keys file --------------------
    def load(self, path: Optional[Union[str, Path]] = None) -> LoadReport:
        """Loads the keys file, creating it from the defaults if absent.

        Missing actions are filled with their default keys and the repaired
        table is written back, so the next start finds a complete file.

        Raises:
            KeyConfigStorageError: If the keys file cannot be created or saved.
            CorruptDefaultsError: If the built-in defaults conflict.
        """
        keys_file = Path(path) if path else self.keys_file
        self.table.reset()

        if not keys_file.exists():
            logging.info("No keys file at %s; creating it from the defaults.", keys_file)
            self.key_config.dump_defaults_file(keys_file)

        report = self.key_config.load_file(keys_file)
        if report.filled and report.file_read:
            self.key_config.save_file(keys_file)

        if self.key_config.check_undefined():
            logging.info(
                "Some actions have no key: %s",
                ", ".join(vk.label for vk in self.key_config.undefined_actions()),
            )
        return report

    def save(self, path: Optional[Union[str, Path]] = None) -> None:
        self.key_config.save_file(Path(path) if path else self.keys_file)

    # ---------------------- Legend --------------------
    def render_legend(
        self, page: int, entries: Sequence[LegendEntry], window: Optional[Any] = None
    ) -> list[LegendCell]:
        return self.legend.render(window or self.stdscr, entries, page)

    def legend_page_count(self, entries: Sequence[LegendEntry], window: Optional[Any] = None) -> int:
        _, width = (window or self.stdscr).getmaxyx()
        return self.legend.page_count(len(entries), width)

    # ---------------------- Dispatch --------------------
    def bind_action(self, vkey: VirtualKey, callback: ActionCallback) -> None:
        self.action_map[vkey] = callback

    def dispatch(self, command: KeyCommand) -> bool:
        """Runs the callback registered for *command*.

        Returns:
            bool: True if a callback ran and reported a change, False for
            unbound keys, resize signals without a callback, and failures.
        """
        if not isinstance(command.action, VirtualKey):
            logging.debug("dispatch: nothing to do for %r", command)
            return False

        callback = self.action_map.get(command.action)
        if callback is None:
            logging.debug("dispatch: no callback for %s", command.action.label)
            return False

        try:
            return bool(callback(command))
        except Exception:
            logging.exception(
                "Action handler for %s failed. This should be investigated.",
                command.action.label,
            )
            return False

    # ---------------------- Diagnostics --------------------
    def debug_tty_input(self, window: Optional[Any] = None) -> None:
        """Diagnostic mode: shows every decoded key until ESC is pressed.

        For each key the code, its range, its name and the bound action are
        written on the last line of *window*.
        """
        logging.debug("Entering TTY Debug Mode. Press keys to see their codes (ESC to exit).")
        target = window or self.stdscr
        self._show_line(target, "TTY Debug Mode: Press keys to see codes (ESC to exit)")

        while True:
            code = self.wait_for_any_key(target)
            if code is None:
                continue
            if code == ESCAPE:
                logging.debug("Exiting TTY Debug Mode on ESC key.")
                break

            if code == curses.KEY_RESIZE:
                info = f"{self.model.describe(code)} -> {KeySignal.RESIZE.value}"
            else:
                vkey = self.table.lookup(code)
                info = f"{self.model.describe(code)} -> {vkey.label if vkey else 'unbound'}"
            self._show_line(target, info)

        self._show_line(target, "TTY Debug Mode ended")

    def _show_line(self, window: Any, text: str) -> None:
        try:
            height, width = window.getmaxyx()
            window.move(height - 1, 0)
            window.clrtoeol()
            window.addnstr(height - 1, 0, text, max(0, width - 1))
            window.refresh()
        except curses.error:
            pass
