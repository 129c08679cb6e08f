# vkeys/core/VirtualKeys.py
"""VirtualKeys.py
==================
The closed set of logical commands ("virtual keys") understood by the
application, together with their built-in default key bindings.

Each virtual key has:
- a stable ordinal (the enum value),
- a stable lowercase-hyphenated label, used as the key in the keys file,
- a default binding: a space-separated list of canonical key names,
- a short display label for the legend (at most 8 cells),
- a one-sentence help text shown by the key configuration menu.

The configuration menu also shows a handful of synthetic entries that are
not virtual keys and never enter the binding table; see `MenuEntry`.
"""

import enum
from typing import NamedTuple


class KeyDef(NamedTuple):
    label: str
    binding: str
    display_label: str
    info: str


# Order matters: it defines the ordinals of VirtualKey.
KEYDEFS: tuple[KeyDef, ...] = (
    KeyDef("generic-cancel", "ESC", "Cancel", "Cancel the ongoing action."),
    KeyDef("generic-select", "SPC", "Select", "Select the highlighted item."),
    KeyDef("generic-credits", "@", "Credits",
           "Print general information about the authors, license, etc."),
    KeyDef("generic-help", "?", "Help",
           "Display hints whenever some help screens are available."),
    KeyDef("generic-quit", "q Q", "Quit", "Exit from the current menu, or quit."),
    KeyDef("generic-save", "s S ^S", "Save", "Save data."),
    KeyDef("generic-reload", "R", "Reload", "Reload appointments and todo items."),
    KeyDef("generic-copy", "c", "Copy", "Copy the item that is currently selected."),
    KeyDef("generic-paste", "p ^V", "Paste", "Paste an item at the current position."),
    KeyDef("generic-change-view", "TAB", "Chg Win", "Select next panel in the main screen."),
    KeyDef("generic-prev-view", "KEY_BTAB", "Prev Win",
           "Select previous panel in the main screen."),
    KeyDef("generic-import", "i I", "Import", "Import data from an external file."),
    KeyDef("generic-export", "x X", "Export", "Export data to a new file format."),
    KeyDef("generic-goto", "g G", "Go to", "Select the day to go to."),
    KeyDef("generic-other-cmd", "o O", "OtherCmd",
           "Show next possible actions inside status bar."),
    KeyDef("generic-config-menu", "C", "Config", "Enter the configuration menu."),
    KeyDef("generic-redraw", "^R", "Redraw", "Redraw the screen."),
    KeyDef("generic-add-appt", "^A", "Add Appt",
           "Add an appointment, whichever panel is currently selected."),
    KeyDef("generic-add-todo", "^T", "Add Todo",
           "Add a todo item, whichever panel is currently selected."),
    KeyDef("generic-prev-day", "T ^H", "-1 Day",
           "Move to previous day in calendar, whichever panel is currently selected."),
    KeyDef("generic-next-day", "t ^L", "+1 Day",
           "Move to next day in calendar, whichever panel is currently selected."),
    KeyDef("generic-prev-week", "W ^K", "-1 Week",
           "Move to previous week in calendar, whichever panel is currently selected."),
    KeyDef("generic-next-week", "w", "+1 Week",
           "Move to next week in calendar, whichever panel is currently selected."),
    KeyDef("generic-prev-month", "M", "-1 Month",
           "Move to previous month in calendar, whichever panel is currently selected."),
    KeyDef("generic-next-month", "m", "+1 Month",
           "Move to next month in calendar, whichever panel is currently selected."),
    KeyDef("generic-prev-year", "Y", "-1 Year",
           "Move to previous year in calendar, whichever panel is currently selected."),
    KeyDef("generic-next-year", "y", "+1 Year",
           "Move to next year in calendar, whichever panel is currently selected."),
    KeyDef("generic-scroll-down", "^N", "Nxt View",
           "Scroll window down (e.g. when displaying text inside a popup window)."),
    KeyDef("generic-scroll-up", "^P", "Prv View",
           "Scroll window up (e.g. when displaying text inside a popup window)."),
    KeyDef("generic-goto-today", "^G", "Today", "Go to today, whichever panel is selected."),
    KeyDef("generic-command", ":", "Command", "Enter command mode."),
    KeyDef("move-right", "l L RGT", "Right", "Move to the right."),
    KeyDef("move-left", "h H LFT", "Left", "Move to the left."),
    KeyDef("move-down", "j J DWN", "Down", "Move down."),
    KeyDef("move-up", "k K UP", "Up", "Move up."),
    KeyDef("start-of-week", "0", "beg Week",
           "Select the first day of the current week when inside the calendar panel."),
    KeyDef("end-of-week", "$", "end Week",
           "Select the last day of the current week when inside the calendar panel."),
    KeyDef("add-item", "a A", "Add Item", "Add an item to the currently selected panel."),
    KeyDef("del-item", "d D", "Del Item", "Delete the currently selected item."),
    KeyDef("edit-item", "e E", "Edit Itm", "Edit the currently selected item."),
    KeyDef("view-item", "v V RET", "View",
           "Display the currently selected item inside a popup window."),
    KeyDef("pipe-item", "|", "Pipe",
           "Pipe the currently selected item to an external program."),
    KeyDef("flag-item", "!", "Flag Itm", "Flag the currently selected item as important."),
    KeyDef("repeat", "r", "Repeat", "Repeat an item."),
    KeyDef("edit-note", "n N", "EditNote",
           "Attach (or edit if one exists) a note to the currently selected item."),
    KeyDef("view-note", ">", "ViewNote",
           "View the note attached to the currently selected item."),
    KeyDef("raise-priority", "+", "Prio.+", "Raise a task priority inside the todo panel."),
    KeyDef("lower-priority", "-", "Prio.-", "Lower a task priority inside the todo panel."),
)


class VirtualKey(enum.IntEnum):
    """Logical command identified by a stable ordinal.

    The member order mirrors `KEYDEFS`; `label`, `default_binding`,
    `display_label` and `info` are read from that table.
    """

    GENERIC_CANCEL = 0
    GENERIC_SELECT = 1
    GENERIC_CREDITS = 2
    GENERIC_HELP = 3
    GENERIC_QUIT = 4
    GENERIC_SAVE = 5
    GENERIC_RELOAD = 6
    GENERIC_COPY = 7
    GENERIC_PASTE = 8
    GENERIC_CHANGE_VIEW = 9
    GENERIC_PREV_VIEW = 10
    GENERIC_IMPORT = 11
    GENERIC_EXPORT = 12
    GENERIC_GOTO = 13
    GENERIC_OTHER_CMD = 14
    GENERIC_CONFIG_MENU = 15
    GENERIC_REDRAW = 16
    GENERIC_ADD_APPT = 17
    GENERIC_ADD_TODO = 18
    GENERIC_PREV_DAY = 19
    GENERIC_NEXT_DAY = 20
    GENERIC_PREV_WEEK = 21
    GENERIC_NEXT_WEEK = 22
    GENERIC_PREV_MONTH = 23
    GENERIC_NEXT_MONTH = 24
    GENERIC_PREV_YEAR = 25
    GENERIC_NEXT_YEAR = 26
    GENERIC_SCROLL_DOWN = 27
    GENERIC_SCROLL_UP = 28
    GENERIC_GOTO_TODAY = 29
    GENERIC_CMD = 30
    MOVE_RIGHT = 31
    MOVE_LEFT = 32
    MOVE_DOWN = 33
    MOVE_UP = 34
    START_OF_WEEK = 35
    END_OF_WEEK = 36
    ADD_ITEM = 37
    DEL_ITEM = 38
    EDIT_ITEM = 39
    VIEW_ITEM = 40
    PIPE_ITEM = 41
    FLAG_ITEM = 42
    REPEAT_ITEM = 43
    EDIT_NOTE = 44
    VIEW_NOTE = 45
    RAISE_PRIORITY = 46
    LOWER_PRIORITY = 47

    @property
    def label(self) -> str:
        return KEYDEFS[self.value].label

    @property
    def default_binding(self) -> str:
        return KEYDEFS[self.value].binding

    @property
    def display_label(self) -> str:
        return KEYDEFS[self.value].display_label

    @property
    def info(self) -> str:
        return KEYDEFS[self.value].info

    @classmethod
    def from_label(cls, label: str) -> "VirtualKey | None":
        """Return the virtual key persisted under *label*, or None."""
        return _BY_LABEL.get(label)


_BY_LABEL: dict[str, VirtualKey] = {vk.label: vk for vk in VirtualKey}


class KeySignal(enum.Enum):
    """Results of the input reader that are not virtual keys."""

    RESIZE = "resize"


class MenuEntry(enum.Enum):
    """Synthetic legend entries of the configuration menu.

    Value is the pair (key text, display label); the key text is fixed and
    is not looked up in the binding table.
    """

    GENERAL = ("g", "General")
    LAYOUT = ("l", "Layout")
    SIDEBAR = ("s", "Sidebar")
    COLOR = ("c", "Color")
    NOTIFY = ("n", "Notify")
    KEYS = ("k", "Keys")

    @property
    def key_text(self) -> str:
        return self.value[0]

    @property
    def display_label(self) -> str:
        return self.value[1]
