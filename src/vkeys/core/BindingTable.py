# vkeys/core/BindingTable.py
"""BindingTable.py
===================
Description:
-----------------------
The authoritative two-way mapping between virtual keys and key codes.

Forward direction: each virtual key owns an ordered list of key codes; the
first one is the primary key shown in the legend. Every virtual key is in
exactly one of three states:

    CONFIGURED  one or more key codes are bound,
    UNDEFINED   the user removed every key on purpose (persisted as UNDEFINED),
    MISSING     the virtual key never received a binding (fresh table or an
                incomplete keys file); `fill_missing` repairs this state.

Reverse direction: `ReverseMap` answers "which virtual key owns this code".
Codes of the ordinary and pseudo ranges live in a dense list indexed by code;
extended codes (multi-byte characters) are sparse and live in a dict.

A key code is in the reverse map if and only if it is in exactly one forward
list. A code can be owned by at most one virtual key; `assign` enforces this
and raises `BindingConflictError` otherwise.
"""

import enum
import logging
import threading
from dataclasses import dataclass, field
from typing import Iterator, Optional

from vkeys.core.Errors import BindingConflictError, CorruptDefaultsError, InvalidKeyCodeError
from vkeys.core.KeyCodes import KeyCodeModel, KeyRange
from vkeys.core.VirtualKeys import VirtualKey


logger = logging.getLogger("vkeys")

UNDEFINED_TOKEN = "UNDEFINED"
NO_KEY_TOKEN = "XXX"


class BindingState(enum.Enum):
    CONFIGURED = "configured"
    UNDEFINED = "undefined"
    MISSING = "missing"


@dataclass
class Binding:
    """Forward entry of one virtual key."""

    state: BindingState = BindingState.MISSING
    codes: list[int] = field(default_factory=list)


# ==================== ReverseMap Class ====================
class ReverseMap:
    """Key code -> virtual key, with one backing store per key range.

    Callers never see the split: the range reported by the key code model
    selects the dense list or the extended dict.
    """

    def __init__(self, model: KeyCodeModel):
        self._model = model
        self._dense: list[Optional[VirtualKey]] = [None] * model.key_max
        self._extended: dict[int, VirtualKey] = {}

    def get(self, code: int) -> Optional[VirtualKey]:
        try:
            key_range = self._model.classify(code)
        except InvalidKeyCodeError:
            return None
        if key_range is KeyRange.EXTENDED:
            return self._extended.get(code)
        return self._dense[code]

    def set(self, code: int, vkey: VirtualKey) -> None:
        if self._model.classify(code) is KeyRange.EXTENDED:
            self._extended[code] = vkey
        else:
            self._dense[code] = vkey

    def discard(self, code: int) -> None:
        try:
            key_range = self._model.classify(code)
        except InvalidKeyCodeError:
            return
        if key_range is KeyRange.EXTENDED:
            self._extended.pop(code, None)
        else:
            self._dense[code] = None

    def clear(self) -> None:
        self._dense = [None] * self._model.key_max
        self._extended.clear()

    def __contains__(self, code: int) -> bool:
        return self.get(code) is not None

    def __iter__(self) -> Iterator[tuple[int, VirtualKey]]:
        for code, vkey in enumerate(self._dense):
            if vkey is not None:
                yield code, vkey
        yield from self._extended.items()

    def __len__(self) -> int:
        return sum(1 for _ in self)


# ==================== BindingTable Class ====================
class BindingTable:
    """Class BindingTable
    ======================
    Owns the forward lists and the reverse map and keeps them consistent.

    All mutating operations (`assign`, `remove`, `mark_undefined`,
    `fill_missing`, `reset`) run under one re-entrant lock, because each of
    them updates the forward list and the reverse map in two steps.

    Attributes:
        model (KeyCodeModel): Shared key code model used for names and ranges.
    """

    def __init__(self, model: KeyCodeModel):
        self.model = model
        self._bindings: dict[VirtualKey, Binding] = {vk: Binding() for vk in VirtualKey}
        self._reverse = ReverseMap(model)
        self._lock = threading.RLock()

    # ---------------------- Mutations --------------------
    def assign(self, code: int, vkey: VirtualKey) -> None:
        """Binds key *code* to *vkey*.

        Raises:
            BindingConflictError: If *code* is already bound, whether to
                another virtual key or to *vkey* itself. Nothing changes.
            InvalidKeyCodeError: If *code* is not a key code.
        """
        with self._lock:
            owner = self._reverse.get(code)
            if owner is not None:
                raise BindingConflictError(code, owner, self.model.name_of(code))

            self._reverse.set(code, vkey)
            binding = self._bindings[vkey]
            binding.codes.append(code)
            binding.state = BindingState.CONFIGURED
            logger.debug("Bound key %r to %s", self.model.name_of(code), vkey.label)

    def remove(self, code: int, vkey: VirtualKey) -> None:
        """Unbinds *code* from *vkey*; a no-op when it is not bound there.

        When the last key of *vkey* goes away the virtual key becomes
        UNDEFINED, never MISSING.
        """
        with self._lock:
            binding = self._bindings[vkey]
            if code not in binding.codes:
                return

            binding.codes.remove(code)
            if self._reverse.get(code) is vkey:
                self._reverse.discard(code)
            if not binding.codes:
                binding.state = BindingState.UNDEFINED
            logger.debug("Unbound key %r from %s", self.model.name_of(code), vkey.label)

    def mark_undefined(self, vkey: VirtualKey) -> None:
        """Releases every key of *vkey* and marks it explicitly unbound."""
        with self._lock:
            binding = self._bindings[vkey]
            for code in binding.codes:
                if self._reverse.get(code) is vkey:
                    self._reverse.discard(code)
            binding.codes.clear()
            binding.state = BindingState.UNDEFINED

    def reset(self) -> None:
        """Returns every virtual key to the MISSING state."""
        with self._lock:
            self._bindings = {vk: Binding() for vk in VirtualKey}
            self._reverse.clear()

    def fill_missing(self) -> int:
        """Assigns the built-in default keys to every MISSING virtual key.

        Returns:
            int: How many virtual keys received at least one default key.

        Raises:
            CorruptDefaultsError: If a default key is already taken. The
                built-in table contradicts itself or the keys already loaded,
                which is a packaging defect; startup should abort.
        """
        assigned = 0
        with self._lock:
            for vkey in VirtualKey:
                if not self.is_missing(vkey):
                    continue

                got_one = False
                for name in vkey.default_binding.split():
                    try:
                        self.assign(self.model.code_of(name), vkey)
                    except BindingConflictError as conflict:
                        raise CorruptDefaultsError(vkey, conflict) from conflict
                    got_one = True
                if got_one:
                    assigned += 1

        if assigned:
            logger.warning(
                "Default key(s) assigned to %d action%s.",
                assigned,
                "" if assigned == 1 else "s",
            )
        return assigned

    # ---------------------- Queries --------------------
    def lookup(self, code: int) -> Optional[VirtualKey]:
        """Return the virtual key bound to *code*, or None."""
        return self._reverse.get(code)

    def state(self, vkey: VirtualKey) -> BindingState:
        return self._bindings[vkey].state

    def is_undefined(self, vkey: VirtualKey) -> bool:
        return self._bindings[vkey].state is BindingState.UNDEFINED

    def is_missing(self, vkey: VirtualKey) -> bool:
        return self._bindings[vkey].state is BindingState.MISSING

    def codes(self, vkey: VirtualKey) -> list[int]:
        return list(self._bindings[vkey].codes)

    def key_names(self, vkey: VirtualKey) -> list[str]:
        """Names of the keys bound to *vkey*, primary key first.

        Codes without a name cannot be written to the keys file and are
        left out.
        """
        names = []
        for code in self._bindings[vkey].codes:
            name = self.model.name_of(code)
            if name is None:
                logger.debug("Key code %d bound to %s has no name.", code, vkey.label)
                continue
            names.append(name)
        return names

    def all_keys(self, vkey: VirtualKey) -> str:
        """Keys of *vkey* as written in the keys file.

        Each name is followed by a space ("q Q "); an explicitly unbound
        virtual key yields "UNDEFINED" and a missing one an empty string.
        """
        if self.is_undefined(vkey):
            return UNDEFINED_TOKEN
        return "".join(f"{name} " for name in self.key_names(vkey))

    def count_keys(self, vkey: VirtualKey) -> int:
        return len(self._bindings[vkey].codes)

    def first_key(self, vkey: VirtualKey) -> str:
        """Primary key name of *vkey*, or "XXX" when it has none."""
        names = self.key_names(vkey)
        return names[0] if names else NO_KEY_TOKEN

    def nth_key(self, vkey: VirtualKey, index: int) -> Optional[str]:
        names = self.key_names(vkey)
        if 0 <= index < len(names):
            return names[index]
        return None

    def bound_codes(self) -> Iterator[tuple[int, VirtualKey]]:
        """Every (code, virtual key) pair of the reverse map."""
        return iter(self._reverse)
