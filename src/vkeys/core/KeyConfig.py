# vkeys/core/KeyConfig.py
"""KeyConfig.py
================
Description:
-----------------------
Reads and writes the keys configuration file.

The file is line oriented UTF-8 text::

    # comment lines are ignored
    generic-quit  q Q
    generic-save  UNDEFINED

The first token is the label of a virtual key, the rest are key names. The
single token UNDEFINED marks the virtual key as explicitly unbound. A virtual
key without a line stays MISSING and must go through `fill_missing` before
the table is used.

Loading is permissive: unknown labels and conflicting keys are collected in a
`LoadReport` and logged, never raised. Any key name resolves to some key code,
so a garbage name simply becomes an unreachable binding.

Writing problems are fatal at startup and raise `KeyConfigStorageError`; a
failed load falls back to the built-in defaults.
"""

import logging
import os
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Protocol, Union

from vkeys.core.BindingTable import UNDEFINED_TOKEN, BindingTable
from vkeys.core.Errors import BindingConflictError, InvalidKeyCodeError, KeyConfigStorageError
from vkeys.core.VirtualKeys import VirtualKey


logger = logging.getLogger("vkeys")

# Fields are separated by ASCII whitespace only; other Unicode spaces
# (U+00A0, U+3000, ...) are key names.
ASCII_WHITESPACE = " \t\r\n\f\v"
_FIELD_SEPARATOR = re.compile(r"[ \t\r\n\f\v]+")

HEADER = (
    "#\n"
    "# vkeys keys configuration file\n"
    "#\n"
    "# In this file the keybindings used by vkeys are defined.\n"
    "# It is generated automatically by vkeys and is maintained\n"
    "# via the key configuration menu of the interactive user\n"
    "# interface. It should not be edited directly.\n"
)


class TextSink(Protocol):
    def write(self, text: str) -> object: ...


@dataclass
class LoadReport:
    """Outcome of loading a keys file.

    Attributes:
        assigned: Number of keys bound.
        undefined: Virtual keys marked UNDEFINED by the file.
        errors: One message per rejected line or key, with its line number.
        filled: Number of actions given their default keys afterwards.
        file_read: False when the keys file could not be read at all.
    """

    assigned: int = 0
    undefined: list[VirtualKey] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    filled: int = 0
    file_read: bool = True

    @property
    def ok(self) -> bool:
        return not self.errors


# ==================== KeyConfig Class ====================
class KeyConfig:
    """Serializer between a `BindingTable` and the keys file format."""

    def __init__(self, table: BindingTable):
        self.table = table

    # ---------------------- Writing --------------------
    def _write_line(self, sink: TextSink, label: str, value: str) -> None:
        sink.write(f"{label}  {value}\n")

    def dump_defaults(self, sink: TextSink) -> None:
        """Writes the built-in default bindings, used on the very first run."""
        sink.write(HEADER + "\n")
        for vkey in VirtualKey:
            self._write_line(sink, vkey.label, vkey.default_binding)

    def save(self, sink: TextSink) -> None:
        """Writes the live bindings of the table.

        MISSING virtual keys have no line, so they stay MISSING when the file
        is loaded again.
        """
        sink.write(HEADER + "\n")
        for vkey in VirtualKey:
            if self.table.is_missing(vkey):
                continue
            self._write_line(sink, vkey.label, self.table.all_keys(vkey))

    # ---------------------- Reading --------------------
    def load(self, lines: Iterable[str]) -> LoadReport:
        """Binds the keys listed in *lines*.

        Args:
            lines: Lines of a keys file, with or without line endings.

        Returns:
            LoadReport: What was bound and what was rejected.
        """
        report = LoadReport()

        for lineno, raw in enumerate(lines, start=1):
            line = raw.strip(ASCII_WHITESPACE)
            if not line or line.startswith("#"):
                continue

            label, *names = _FIELD_SEPARATOR.split(line)

            vkey = VirtualKey.from_label(label)
            if vkey is None:
                report.errors.append(f"line {lineno}: unknown action {label!r}")
                continue
            if not names:
                report.errors.append(f"line {lineno}: no keys given for {label!r}")
                continue

            if names == [UNDEFINED_TOKEN]:
                self.table.mark_undefined(vkey)
                report.undefined.append(vkey)
                continue

            for name in names:
                code = self.table.model.code_of(name)
                try:
                    self.table.assign(code, vkey)
                except (BindingConflictError, InvalidKeyCodeError) as e:
                    report.errors.append(f"line {lineno}: {e}")
                else:
                    report.assigned += 1

        for message in report.errors:
            logger.warning("Keys file: %s", message)
        logger.debug(
            "Keys file loaded: %d key(s) bound, %d action(s) undefined, %d error(s).",
            report.assigned,
            len(report.undefined),
            len(report.errors),
        )
        return report

    # ---------------------- Checks --------------------
    def check_undefined(self) -> bool:
        """True if some virtual key has been left explicitly unbound."""
        return any(self.table.is_undefined(vkey) for vkey in VirtualKey)

    def check_missing(self) -> bool:
        """True if some virtual key has no binding at all."""
        return any(self.table.is_missing(vkey) for vkey in VirtualKey)

    def undefined_actions(self) -> list[VirtualKey]:
        return [vkey for vkey in VirtualKey if self.table.is_undefined(vkey)]

    def missing_actions(self) -> list[VirtualKey]:
        return [vkey for vkey in VirtualKey if self.table.is_missing(vkey)]

    # ---------------------- Files --------------------
    def _write_atomically(self, path: Path, writer: Callable[[TextSink], None]) -> None:
        """Runs *writer* on a temporary file next to *path*, then renames it.

        A failure at any point leaves an existing *path* untouched and
        removes the temporary file.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as sink:
                writer(sink)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.warning(f"Could not remove temporary keys file {tmp_name}")
            raise

    def dump_defaults_file(self, path: Union[str, Path]) -> None:
        """Creates a keys file holding the default bindings.

        Raises:
            KeyConfigStorageError: If the file cannot be created.
        """
        path = Path(path)
        try:
            self._write_atomically(path, self.dump_defaults)
        except OSError as e:
            raise KeyConfigStorageError(f"Could not create default keys file {path}: {e}") from e
        logger.info(f"Default keys file written to {path}")

    def save_file(self, path: Union[str, Path]) -> None:
        """Writes the live bindings to *path*, replacing it in one step.

        Raises:
            KeyConfigStorageError: If the file cannot be written.
        """
        path = Path(path)
        try:
            self._write_atomically(path, self.save)
        except OSError as e:
            raise KeyConfigStorageError(f"Could not save keys file {path}: {e}") from e
        logger.info(f"Key bindings saved to {path}")

    def load_file(self, path: Union[str, Path]) -> LoadReport:
        """Loads *path* and fills in defaults for every missing action.

        An unreadable file is not fatal: it is logged and the table is filled
        with the built-in defaults instead.

        Raises:
            CorruptDefaultsError: If the defaults cannot be assigned.
        """
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8", errors="replace") as fd:
                report = self.load(fd)
        except OSError as e:
            logger.error(f"Could not read keys file '{path}': {e}. Using defaults.")
            report = LoadReport(errors=[f"{path}: {e}"], file_read=False)

        if self.check_missing():
            report.filled = self.table.fill_missing()
        return report
