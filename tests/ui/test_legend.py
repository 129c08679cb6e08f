# tests/ui/test_legend.py
"""Unit tests for the key legend renderer.
==========================================

Checks pagination, slot geometry and the "other commands" slot, and that
drawing into a (mocked) curses window tolerates writes past the edge.
"""

import curses
from unittest.mock import MagicMock, call

import pytest

from vkeys.core.BindingTable import BindingTable
from vkeys.core.VirtualKeys import MenuEntry, VirtualKey
from vkeys.ui.Legend import LegendRenderer, display_width, truncate_string


ALL = list(VirtualKey)


@pytest.fixture
def legend(default_table: BindingTable) -> LegendRenderer:
    return LegendRenderer(default_table)


def test_truncate_string_counts_cells() -> None:
    assert truncate_string("Quit", 8) == "Quit"
    assert truncate_string("Add Appt+", 8) == "Add Appt"
    assert truncate_string("日本語", 3) == "日"
    assert display_width("日本") == 4


# ---------------------- Pagination --------------------
def test_pagination_at_80_columns(legend: LegendRenderer) -> None:
    assert legend.per_line(80) == 6
    assert legend.page_size(80) == 12
    assert legend.page_base(0, 80) == 0
    assert legend.page_base(2, 80) == 22
    assert legend.page_count(len(ALL), 80) == 5
    assert legend.page_count(12, 80) == 1
    assert legend.page_count(13, 80) == 2


def test_narrow_window_uses_fewer_commands(legend: LegendRenderer) -> None:
    assert legend.per_line(30) == 2
    assert legend.page_size(30) == 4
    assert legend.per_line(5) == 1


# ---------------------- Layout --------------------
def test_first_page_layout(legend: LegendRenderer) -> None:
    cells = legend.layout(ALL, 0, 80)

    assert len(cells) == 12
    first, second, third = cells[0], cells[1], cells[2]
    assert (first.entry, first.y, first.key_x, first.key_text) == (VirtualKey.GENERIC_CANCEL, 0, 0, "ESC")
    assert (first.label_x, first.label) == (4, "Cancel")
    assert (second.entry, second.y, second.key_x) == (VirtualKey.GENERIC_SELECT, 1, 0)
    # Column width is KEY_LEN + LABEL_LEN + 1 + padding = 13; "@" is right-aligned.
    assert (third.entry, third.y, third.key_x, third.label_x) == (VirtualKey.GENERIC_CREDITS, 0, 15, 17)


def test_last_slot_of_non_final_page_is_other_cmd(legend: LegendRenderer) -> None:
    for page in range(legend.page_count(len(ALL), 80) - 1):
        cells = legend.layout(ALL, page, 80)
        assert cells[-1].entry is VirtualKey.GENERIC_OTHER_CMD
        assert cells[-1].key_text == "o"


def test_final_page_shows_remaining_entries(legend: LegendRenderer) -> None:
    cells = legend.layout(ALL, 4, 80)
    assert [c.entry for c in cells] == ALL[44:]
    # Four slots spread over the full width: padding = 160 // 4 - 12.
    assert cells[2].key_x == 40 + 3 - len(cells[2].key_text)


def test_every_entry_is_reachable(legend: LegendRenderer) -> None:
    shown = set()
    for page in range(legend.page_count(len(ALL), 80)):
        shown.update(c.entry for c in legend.layout(ALL, page, 80))
    assert shown == set(ALL)


def test_page_past_the_end_is_empty(legend: LegendRenderer) -> None:
    assert legend.layout(ALL, 10, 80) == []


def test_negative_page_is_empty(legend: LegendRenderer) -> None:
    assert legend.layout(ALL, -1, 80) == []
    assert legend.layout(ALL, -3, 80) == []


def test_menu_entries_and_unbound_keys(default_table: BindingTable, legend: LegendRenderer) -> None:
    default_table.mark_undefined(VirtualKey.GENERIC_HELP)
    entries = [MenuEntry.GENERAL, MenuEntry.KEYS, VirtualKey.GENERIC_HELP]
    cells = legend.layout(entries, 0, 80)

    assert [c.key_text for c in cells] == ["g", "k", "XXX"]
    assert cells[0].label == "General"


def test_wide_key_names_are_clipped(default_table: BindingTable, legend: LegendRenderer) -> None:
    default_table.reset()
    default_table.assign(default_table.model.code_of("日"), VirtualKey.GENERIC_QUIT)
    cell = legend.layout([VirtualKey.GENERIC_QUIT], 0, 80)[0]
    assert cell.key_text == "日"
    assert cell.key_x == 1


# ---------------------- Drawing --------------------
def test_render_draws_keys_bold(legend: LegendRenderer) -> None:
    window = MagicMock()
    window.getmaxyx.return_value = (2, 80)

    cells = legend.render(window, ALL, page=0)

    window.erase.assert_called_once()
    window.noutrefresh.assert_called_once()
    assert window.addstr.call_args_list[0] == call(0, 0, "ESC", curses.A_BOLD)
    assert window.addstr.call_args_list[1] == call(0, 4, "Cancel")
    assert len(window.addstr.call_args_list) == 2 * len(cells)


def test_render_ignores_curses_errors(legend: LegendRenderer) -> None:
    window = MagicMock()
    window.getmaxyx.return_value = (2, 80)
    window.addstr.side_effect = curses.error("edge")

    legend.render(window, ALL, page=1)

    window.noutrefresh.assert_called_once()
