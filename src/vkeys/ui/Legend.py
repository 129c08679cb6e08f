# vkeys/ui/Legend.py
"""Legend.py
=============
Renders the key legend: the two status lines at the bottom of the screen that
list the commands reachable from the current view, as "key label" pairs.

Entries are laid out column by column in a two-row grid. A page holds
`2 * cmds_per_line` slots; when there are more entries than slots, the last
slot of every page but the final one shows the "other commands" action
(generic-other-cmd) so the user can always page forward.

    ┌─────────────────────────────────────────────────────────────┐
    │  ? Help       q Quit       s Save      TAB Chg Win ...      │
    │  @ Credits    R Reload     c Copy        o OtherCmd         │
    └─────────────────────────────────────────────────────────────┘

Key names are right-aligned in a KEY_LEN cell column and clipped by display
width (wcwidth), so wide characters never overflow into the label.
"""

import curses
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Sequence, Union

from wcwidth import wcswidth, wcwidth

from vkeys.core.VirtualKeys import MenuEntry, VirtualKey


if TYPE_CHECKING:
    from vkeys.core.BindingTable import BindingTable


KEY_LEN = 3
LABEL_LEN = 8
DEFAULT_CMDS_PER_LINE = 6

LegendEntry = Union[VirtualKey, MenuEntry]


def truncate_string(s: str, max_width: int) -> str:
    """Return *s* clipped to visual width *max_width*.

    Wide characters (e.g. CJK) count as two cells; non-printable characters
    count as one.
    """
    result: list[str] = []
    consumed = 0

    for ch in s:
        w = wcwidth(ch)
        if w < 0:  # Non-printable → treat as single-cell
            w = 1
        if consumed + w > max_width:
            break
        result.append(ch)
        consumed += w

    return "".join(result)


def display_width(s: str) -> int:
    width = wcswidth(s)
    if width < 0:
        width = sum(max(wcwidth(ch), 1) for ch in s)
    return width


@dataclass(frozen=True)
class LegendCell:
    """One laid-out legend slot."""

    entry: LegendEntry
    y: int
    key_x: int
    key_text: str
    label_x: int
    label: str


# ==================== LegendRenderer Class ====================
class LegendRenderer:
    """Paginates legend entries and draws them into a curses window.

    Attributes:
        table (BindingTable): Source of the primary key of each virtual key.
        cmds_per_line (int): Preferred number of entries per row; fewer are
            used when the window is too narrow.
    """

    def __init__(self, table: "BindingTable", cmds_per_line: int = DEFAULT_CMDS_PER_LINE):
        self.table = table
        self.cmds_per_line = max(1, cmds_per_line)

    # ---------------------- Pagination --------------------
    def per_line(self, width: int) -> int:
        fits = width // (KEY_LEN + LABEL_LEN + 1)
        return max(1, min(self.cmds_per_line, fits))

    def page_size(self, width: int) -> int:
        return 2 * self.per_line(width)

    def page_base(self, page: int, width: int) -> int:
        """Index of the first entry shown on *page*."""
        return page * max(1, self.page_size(width) - 1)

    def page_count(self, count: int, width: int) -> int:
        size = self.page_size(width)
        if count <= size:
            return 1
        step = max(1, size - 1)
        return 1 + -(-(count - size) // step)

    # ---------------------- Layout --------------------
    def key_text(self, entry: LegendEntry) -> str:
        if isinstance(entry, MenuEntry):
            return entry.key_text
        return self.table.first_key(entry)

    def layout(self, entries: Sequence[LegendEntry], page: int, width: int) -> list[LegendCell]:
        """Compute the cells of *page* for a window *width* cells wide."""
        if page < 0:
            return []
        count = len(entries)
        base = self.page_base(page, width)
        size = min(self.page_size(width), count - base)
        if size <= 0:
            return []

        padding = (width * 2) // size - (KEY_LEN + LABEL_LEN + 1)
        cmd_len = KEY_LEN + LABEL_LEN + 1 + padding

        cells: list[LegendCell] = []
        for i in range(size):
            if i < size - 1 or base + i == count - 1:
                entry: LegendEntry = entries[base + i]
            else:
                entry = VirtualKey.GENERIC_OTHER_CMD

            key_x = (i // 2) * cmd_len
            y = i % 2
            key = truncate_string(self.key_text(entry), KEY_LEN)
            shift_x = KEY_LEN - display_width(key)

            cells.append(
                LegendCell(
                    entry=entry,
                    y=y,
                    key_x=key_x + shift_x,
                    key_text=key,
                    label_x=key_x + KEY_LEN + 1,
                    label=entry.display_label,
                )
            )
        return cells

    # ---------------------- Drawing --------------------
    def render(self, window: Any, entries: Sequence[LegendEntry], page: int = 0) -> list[LegendCell]:
        """Draw *page* of *entries* into *window* (at least two rows high).

        The window is erased first and refreshed with `noutrefresh()`; the
        caller is expected to call `curses.doupdate()`.
        """
        _, width = window.getmaxyx()
        cells = self.layout(entries, page, width)

        window.erase()
        for cell in cells:
            try:
                window.addstr(cell.y, cell.key_x, cell.key_text, curses.A_BOLD)
                room = width - cell.label_x
                if room > 0:
                    window.addstr(cell.y, cell.label_x, truncate_string(cell.label, room))
            except curses.error:
                # Writing into the bottom-right cell always raises.
                pass
            except Exception:
                logging.exception("Unexpected error drawing legend cell %r", cell)
        window.noutrefresh()
        return cells
