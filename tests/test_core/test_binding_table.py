# tests/test_core/test_binding_table.py
"""Unit tests for `BindingTable` and `ReverseMap`.
=================================================

Verifies the three binding states, conflict detection, the two reverse map
backing stores and the repair of missing actions with the built-in defaults.
"""

import curses

import pytest

from vkeys.core.BindingTable import BindingState, BindingTable, ReverseMap
from vkeys.core.Errors import BindingConflictError, CorruptDefaultsError, InvalidKeyCodeError
from vkeys.core.KeyCodes import KeyCodeModel
from vkeys.core.VirtualKeys import VirtualKey


QUIT = VirtualKey.GENERIC_QUIT
SAVE = VirtualKey.GENERIC_SAVE


def snapshot(table: BindingTable) -> tuple:
    return (
        {vk: (table.state(vk), table.codes(vk)) for vk in VirtualKey},
        sorted(table.bound_codes()),
    )


# ---------------------- ReverseMap --------------------
def test_reverse_map_uses_both_stores(model: KeyCodeModel) -> None:
    reverse = ReverseMap(model)
    extended = ord("é") + model.key_max
    reverse.set(ord("q"), QUIT)
    reverse.set(curses.KEY_F0 + 2, SAVE)
    reverse.set(extended, SAVE)

    assert reverse.get(ord("q")) is QUIT
    assert reverse.get(curses.KEY_F0 + 2) is SAVE
    assert reverse.get(extended) is SAVE
    assert extended in reverse
    assert len(reverse) == 3

    reverse.discard(extended)
    assert reverse.get(extended) is None
    assert len(reverse) == 2

    reverse.clear()
    assert len(reverse) == 0


def test_reverse_map_invalid_codes(model: KeyCodeModel) -> None:
    reverse = ReverseMap(model)
    assert reverse.get(0) is None
    assert reverse.get(150) is None
    reverse.discard(150)
    with pytest.raises(InvalidKeyCodeError):
        reverse.set(150, QUIT)


# ---------------------- Assign / remove --------------------
def test_fresh_table_is_missing(table: BindingTable) -> None:
    for vkey in VirtualKey:
        assert table.state(vkey) is BindingState.MISSING
        assert table.is_missing(vkey)
        assert table.count_keys(vkey) == 0
        assert table.all_keys(vkey) == ""
        assert table.first_key(vkey) == "XXX"


def test_quit_scenario(table: BindingTable, model: KeyCodeModel) -> None:
    """q and Q on quit, then removed one by one until quit is UNDEFINED."""
    q, big_q = model.code_of("q"), model.code_of("Q")

    table.assign(q, QUIT)
    table.assign(big_q, QUIT)
    assert table.all_keys(QUIT) == "q Q "
    assert table.first_key(QUIT) == "q"
    assert table.nth_key(QUIT, 1) == "Q"
    assert table.nth_key(QUIT, 2) is None
    assert table.count_keys(QUIT) == 2

    table.remove(q, QUIT)
    assert table.all_keys(QUIT) == "Q "
    assert table.lookup(q) is None

    table.remove(big_q, QUIT)
    assert table.all_keys(QUIT) == "UNDEFINED"
    assert table.is_undefined(QUIT)
    assert not table.is_missing(QUIT)
    assert table.count_keys(QUIT) == 0


def test_conflict_keeps_first_owner(table: BindingTable, model: KeyCodeModel) -> None:
    code = model.code_of("s")
    table.assign(code, SAVE)

    with pytest.raises(BindingConflictError) as excinfo:
        table.assign(code, QUIT)

    err = excinfo.value
    assert err.code == code
    assert err.owner is SAVE
    assert "generic-save" in str(err)
    assert table.lookup(code) is SAVE
    assert table.is_missing(QUIT)


def test_assigning_the_same_key_twice_to_one_action_conflicts(
    table: BindingTable, model: KeyCodeModel
) -> None:
    code = model.code_of("s")
    table.assign(code, SAVE)
    with pytest.raises(BindingConflictError):
        table.assign(code, SAVE)
    assert table.codes(SAVE) == [code]


def test_assign_then_remove_restores_previous_state(
    default_table: BindingTable, model: KeyCodeModel
) -> None:
    code = model.code_of("F5")
    before = snapshot(default_table)

    default_table.assign(code, SAVE)
    assert default_table.lookup(code) is SAVE
    default_table.remove(code, SAVE)

    assert snapshot(default_table) == before


def test_assign_then_remove_last_key_is_undefined(
    table: BindingTable, model: KeyCodeModel
) -> None:
    code = model.code_of("é")
    table.mark_undefined(SAVE)

    table.assign(code, SAVE)
    assert table.state(SAVE) is BindingState.CONFIGURED
    table.remove(code, SAVE)

    assert table.is_undefined(SAVE)
    assert table.lookup(code) is None


def test_remove_key_of_another_action_is_noop(
    table: BindingTable, model: KeyCodeModel
) -> None:
    code = model.code_of("q")
    table.assign(code, QUIT)
    table.remove(code, SAVE)
    assert table.lookup(code) is QUIT
    assert table.is_missing(SAVE)


def test_invalid_code_is_rejected_without_change(table: BindingTable) -> None:
    with pytest.raises(InvalidKeyCodeError):
        table.assign(0, QUIT)
    assert table.is_missing(QUIT)
    assert table.lookup(0) is None


@pytest.mark.parametrize("codepoint", [0xD800, 0xDFFF, 0x110000])
def test_extended_code_outside_unicode_is_rejected(
    table: BindingTable, model: KeyCodeModel, codepoint: int
) -> None:
    code = model.key_max + codepoint
    with pytest.raises(InvalidKeyCodeError):
        table.assign(code, QUIT)
    assert table.is_missing(QUIT)
    assert table.lookup(code) is None
    assert table.all_keys(QUIT) == ""


def test_extended_codes_are_bound_like_any_other(
    table: BindingTable, model: KeyCodeModel
) -> None:
    code = model.code_of("日")
    table.assign(code, VirtualKey.ADD_ITEM)
    assert table.lookup(code) is VirtualKey.ADD_ITEM
    assert table.all_keys(VirtualKey.ADD_ITEM) == "日 "


def test_mark_undefined_releases_keys(table: BindingTable, model: KeyCodeModel) -> None:
    q = model.code_of("q")
    table.assign(q, QUIT)
    table.mark_undefined(QUIT)

    assert table.is_undefined(QUIT)
    assert table.lookup(q) is None
    # The released key can be taken by another action.
    table.assign(q, SAVE)
    assert table.lookup(q) is SAVE


def test_reset_returns_every_action_to_missing(default_table: BindingTable) -> None:
    default_table.reset()
    assert all(default_table.is_missing(vk) for vk in VirtualKey)
    assert list(default_table.bound_codes()) == []


# ---------------------- Defaults --------------------
def test_fill_missing_on_empty_table(table: BindingTable, caplog) -> None:
    with caplog.at_level("WARNING", logger="vkeys"):
        filled = table.fill_missing()

    assert filled == len(VirtualKey)
    assert not any(table.is_missing(vk) for vk in VirtualKey)
    assert "Default key(s) assigned to 48 actions." in caplog.text


def test_fill_missing_matches_default_bindings(default_table: BindingTable) -> None:
    for vkey in VirtualKey:
        assert default_table.all_keys(vkey) == "".join(
            f"{name} " for name in vkey.default_binding.split()
        )
    assert default_table.lookup(ord("j")) is VirtualKey.MOVE_DOWN
    assert default_table.lookup(curses.KEY_DOWN) is VirtualKey.MOVE_DOWN
    assert default_table.lookup(ord("0")) is VirtualKey.START_OF_WEEK
    assert default_table.lookup(10) is VirtualKey.VIEW_ITEM


def test_fill_missing_leaves_configured_and_undefined_alone(
    table: BindingTable, model: KeyCodeModel
) -> None:
    table.assign(model.code_of("F2"), QUIT)
    table.mark_undefined(SAVE)

    filled = table.fill_missing()

    assert filled == len(VirtualKey) - 2
    assert table.all_keys(QUIT) == "F2 "
    assert table.is_undefined(SAVE)


def test_fill_missing_nothing_to_do(default_table: BindingTable, caplog) -> None:
    with caplog.at_level("WARNING", logger="vkeys"):
        assert default_table.fill_missing() == 0
    assert "Default key(s)" not in caplog.text


def test_fill_missing_conflict_is_corrupt_defaults(
    table: BindingTable, model: KeyCodeModel
) -> None:
    # "q" is a default of generic-quit; taking it first makes the defaults clash.
    table.assign(model.code_of("q"), SAVE)

    with pytest.raises(CorruptDefaultsError) as excinfo:
        table.fill_missing()

    assert excinfo.value.vkey is QUIT
    assert excinfo.value.index == int(QUIT)
    assert isinstance(excinfo.value.conflict, BindingConflictError)
