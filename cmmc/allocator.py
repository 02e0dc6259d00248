"""cmmc.allocator

Address spaces, label generation and the string constant pool.

One `AddressAllocator` is created per compilation and passed through the
translate pass. Global and constant slots persist for the whole program;
local, parameter and temporary slots restart at zero for every function.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterator, List


class ScopeTag(Enum):
    """Address space of a storage slot; the value is its operand prefix."""
    GLOBAL = "$"
    LOCAL = "@"
    PARAM = "%"
    TEMPORARY = "&"
    CONST = "?"


PER_FUNCTION = (ScopeTag.LOCAL, ScopeTag.PARAM, ScopeTag.TEMPORARY)


def format_address(slot: int, scope: ScopeTag) -> str:
    return f"{scope.value}{slot}"


class ConstantPool:
    """String literals in first-seen order. Duplicates get their own slot."""

    def __init__(self):
        self._values: List[str] = []

    def add(self, value: str) -> int:
        self._values.append(value)
        return len(self._values) - 1

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


class AddressAllocator:
    def __init__(self):
        self._counters: Dict[ScopeTag, int] = {tag: 0 for tag in ScopeTag}
        self._label_counter = 0
        self.constants = ConstantPool()

    def new_slot(self, scope: ScopeTag) -> int:
        if scope is ScopeTag.CONST:
            raise ValueError("constant slots are allocated through add_constant()")
        slot = self._counters[scope]
        self._counters[scope] += 1
        return slot

    def new_address(self, scope: ScopeTag) -> str:
        return format_address(self.new_slot(scope), scope)

    def new_temporary(self) -> str:
        return self.new_address(ScopeTag.TEMPORARY)

    def add_constant(self, value: str) -> str:
        slot = self.constants.add(value)
        self._counters[ScopeTag.CONST] = len(self.constants)
        return format_address(slot, ScopeTag.CONST)

    def count(self, scope: ScopeTag) -> int:
        """Number of slots handed out so far in `scope`."""
        return self._counters[scope]

    def new_label(self) -> str:
        label = f"~{self._label_counter}"
        self._label_counter += 1
        return label

    def reset_function(self) -> None:
        for tag in PER_FUNCTION:
            self._counters[tag] = 0
