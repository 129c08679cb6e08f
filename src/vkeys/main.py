#!/usr/bin/env python3
# vkeys/main.py
"""
vkeys Main Entry Point
======================

Command line entry point of the key-binding engine. It performs:
1) Environment Loading: reads <config dir>/.env before anything else.
2) Configuration & Logging: loads config.toml and initializes logging.
3) Command dispatch:
   --dump-defaults PATH  write the default keys file and exit,
   --check PATH          validate a keys file and report its problems,
   --debug-keys          show raw key codes, their names and bindings,
   (no option)           interactive key tester with the paged legend.
4) Curses Wrapper: safely initializes/tears down curses for the interactive
   modes.
"""

from __future__ import annotations

import argparse
import curses
import locale
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from vkeys import __version__
from vkeys.core.BindingTable import BindingTable
from vkeys.core.Errors import KeyBindingError
from vkeys.core.InputReader import KeyCommand
from vkeys.core.KeyCodes import KeyCodeModel
from vkeys.core.KeyConfig import KeyConfig
from vkeys.core.VirtualKeys import KeySignal, VirtualKey
from vkeys.ui.KeyBinder import KeyBinder
from vkeys.utils.logging_config import setup_logging
from vkeys.utils.utils import get_config_dir, load_config


logger = logging.getLogger("vkeys")

LEGEND_HEIGHT = 2


# ==================== KeyTester Class ====================
class KeyTester:
    """Interactive key tester.

    Reads commands with the count/register prefix, shows what they resolve
    to, and keeps the key legend at the bottom of the screen. The legend
    lists every virtual key, so it spans several pages; generic-other-cmd
    cycles through them.
    """

    def __init__(self, stdscr: Any, binder: KeyBinder):
        self.stdscr = stdscr
        self.binder = binder
        self.entries: list[VirtualKey] = list(VirtualKey)
        self.page = 0
        self.running = True
        self.last: Optional[KeyCommand] = None
        self.legend_win: Any = None

        binder.bind_action(VirtualKey.GENERIC_QUIT, self._quit)
        binder.bind_action(VirtualKey.GENERIC_OTHER_CMD, self._next_page)
        binder.bind_action(VirtualKey.GENERIC_REDRAW, self._redraw)

    # ---------------------- Actions --------------------
    def _quit(self, command: KeyCommand) -> bool:
        self.running = False
        return False

    def _next_page(self, command: KeyCommand) -> bool:
        pages = self.binder.legend_page_count(self.entries, self.legend_win)
        self.page = (self.page + command.count) % pages
        return True

    def _redraw(self, command: KeyCommand) -> bool:
        self.stdscr.clear()
        return True

    # ---------------------- Drawing --------------------
    def _create_legend_window(self) -> None:
        height, width = self.stdscr.getmaxyx()
        self.legend_win = curses.newwin(
            LEGEND_HEIGHT, width, max(0, height - LEGEND_HEIGHT), 0
        )
        pages = self.binder.legend_page_count(self.entries, self.legend_win)
        self.page = min(self.page, pages - 1)

    def _status_text(self) -> list[str]:
        lines = ["vkeys key tester: press keys, 'q' quits, 'o' shows more commands."]
        if self.last is None:
            return lines

        cmd = self.last
        if isinstance(cmd.action, VirtualKey):
            action = f"{cmd.action.label} ({cmd.action.display_label})"
        elif isinstance(cmd.action, KeySignal):
            action = cmd.action.value
        else:
            action = "unbound"
        lines.append(self.binder.model.describe(cmd.code))
        lines.append(f"action={action} count={cmd.count} register={cmd.register}")
        if isinstance(cmd.action, VirtualKey):
            lines.append(self.binder.describe(cmd.action))
        return lines

    def draw(self) -> None:
        self.stdscr.erase()
        _, width = self.stdscr.getmaxyx()
        for y, text in enumerate(self._status_text()):
            try:
                self.stdscr.addnstr(y, 0, text, max(0, width - 1))
            except curses.error:
                pass
        self.stdscr.noutrefresh()
        self.binder.render_legend(self.page, self.entries, self.legend_win)
        curses.doupdate()

    # ---------------------- Main loop --------------------
    def run(self) -> None:
        self._create_legend_window()
        while self.running:
            self.draw()
            command = self.binder.resolve_next_command(with_prefix=True)
            if command is None:
                continue
            self.last = command
            logger.debug("Key tester resolved %r", command)

            if command.action is KeySignal.RESIZE:
                curses.update_lines_cols()
                self._create_legend_window()
                continue
            self.binder.dispatch(command)


# --- Curses Application Runners ---
def _prepare_screen(stdscr: Any, config: dict[str, Any]) -> None:
    escdelay = int(config.get("keys", {}).get("escdelay", 25))
    try:
        curses.set_escdelay(escdelay)
    except Exception:
        os.environ.setdefault("ESCDELAY", str(escdelay))
    stdscr.keypad(True)
    try:
        curses.curs_set(0)
    except curses.error:
        pass


def tester_runner(stdscr: Any, config: dict[str, Any]) -> None:
    """Target for `curses.wrapper`: loads the key bindings and runs the tester."""
    _prepare_screen(stdscr, config)
    binder = KeyBinder(stdscr, config=config)
    binder.load()
    KeyTester(stdscr, binder).run()


def debug_keys_runner(stdscr: Any, config: dict[str, Any]) -> None:
    """Target for `curses.wrapper`: TTY diagnostics until ESC."""
    _prepare_screen(stdscr, config)
    binder = KeyBinder(stdscr, config=config)
    binder.load()
    binder.debug_tty_input()


# --- Non-interactive commands ---
def dump_defaults(path: Path) -> int:
    key_config = KeyConfig(BindingTable(KeyCodeModel()))
    key_config.dump_defaults_file(path)
    print(f"Default key bindings written to {path}")
    return 0


def check_keys_file(path: Path) -> int:
    """Loads *path* without filling defaults and prints what is wrong with it.

    Returns:
        int: 0 for a clean file, 1 if anything was rejected or is missing.
    """
    key_config = KeyConfig(BindingTable(KeyCodeModel()))
    try:
        with path.open("r", encoding="utf-8", errors="replace") as fd:
            report = key_config.load(fd)
    except OSError as e:
        print(f"Cannot read {path}: {e}", file=sys.stderr)
        return 1

    for message in report.errors:
        print(f"error: {message}")
    for vkey in key_config.undefined_actions():
        print(f"undefined: {vkey.label}")
    missing = key_config.missing_actions()
    for vkey in missing:
        print(f"missing: {vkey.label} (default: {vkey.default_binding})")

    print(f"{report.assigned} key(s) bound, {len(report.errors)} error(s), {len(missing)} missing action(s).")
    return 0 if report.ok and not missing else 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vkeys",
        description="Configurable key bindings for curses applications.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--dump-defaults", metavar="PATH", type=Path,
                      help="write the default keys file to PATH and exit")
    mode.add_argument("--check", metavar="PATH", type=Path,
                      help="validate the keys file at PATH and exit")
    mode.add_argument("--debug-keys", action="store_true",
                      help="show raw key codes and their bindings (ESC exits)")
    return parser


def start(argv: Optional[list[str]] = None) -> None:
    """
    Loads the environment, configuration and logging, then runs the mode
    selected on the command line. Fatal errors are logged and exit with
    status 1.
    """
    # --- Step 1: Load Environment Variables from the User's Config Directory ---
    try:
        load_dotenv(dotenv_path=get_config_dir() / ".env")
    except Exception as e:
        print(f"Warning: could not load .env file: {e}", file=sys.stderr)

    # --- Step 2: Immediate Logging and Configuration Setup ---
    try:
        config: dict[str, Any] = load_config()
        setup_logging(config)
    except Exception as e:
        print(f"FATAL: Could not initialize configuration or logging system: {e}", file=sys.stderr)
        sys.exit(1)

    args = _build_parser().parse_args(argv)

    # --- Step 3: Non-interactive commands ---
    if args.dump_defaults or args.check:
        try:
            if args.dump_defaults:
                status = dump_defaults(args.dump_defaults.expanduser())
            else:
                status = check_keys_file(args.check.expanduser())
        except KeyBindingError as e:
            logger.critical("Fatal key configuration error: %s", e, exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        sys.exit(status)

    # --- Step 4: Curses Application Runner ---
    logger.info("vkeys starting up...")
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        logger.warning("Could not set system locale. Character rendering may be affected.")

    runner = debug_keys_runner if args.debug_keys else tester_runner
    try:
        curses.wrapper(runner, config)
        logger.info("vkeys shut down gracefully.")
    except KeyBindingError as e:
        logger.critical("Fatal key configuration error: %s", e, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception:
        logger.critical("Unhandled exception at the top level.", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    start()
