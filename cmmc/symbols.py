"""cmmc.symbols

Scope chain used by both compiler passes.

Each `SymbolTable` is one lexical scope. Variables have a single binding per
scope; functions may be overloaded on their ordered parameter types and are
always looked up in the root (global) scope.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from cmmc.allocator import ScopeTag, format_address
from cmmc.ast_nodes import Type
from cmmc.errors import DeclarationConflict, UndeclaredName


logger = logging.getLogger(__name__)


@dataclass
class VariableEntry:
    type: Type
    # Only set during translation; the check pass does not allocate storage.
    slot: Optional[int] = None
    scope: Optional[ScopeTag] = None

    @property
    def address(self) -> str:
        if self.slot is None or self.scope is None:
            return ""
        return format_address(self.slot, self.scope)


@dataclass
class FunctionEntry:
    return_type: Type
    param_types: Tuple[Type, ...]
    forward: bool = False

    @property
    def type(self) -> Type:
        return self.return_type


Entry = Union[VariableEntry, FunctionEntry]


def mangle_label(name: str, param_types: Sequence[Type]) -> str:
    """Code label of one overload: `fact(int)` -> `fact_int`."""
    return "_".join([name, *(t.name for t in param_types)])


class SymbolTable:
    def __init__(self, parent: Optional["SymbolTable"] = None):
        self.parent = parent
        self.root: SymbolTable = parent.root if parent is not None else self
        self._table: Dict[str, List[Entry]] = {}

    def child(self) -> "SymbolTable":
        return SymbolTable(parent=self)

    def add_entry(self, name: str, entry: Entry) -> None:
        existing = self._table.get(name)
        if isinstance(entry, VariableEntry):
            if existing:
                raise DeclarationConflict(f"Variable {name} has already been declared")
            self._table[name] = [entry]
            logger.debug("declare variable %s: %s", name, entry.type)
            return

        entries = existing if existing is not None else []
        for i, item in enumerate(entries):
            if isinstance(item, VariableEntry):
                raise DeclarationConflict(f"Function {name} has already been declared")
            if item.param_types != entry.param_types:
                continue
            if item.forward and not entry.forward:
                # A full definition completes its forward declaration.
                entries[i] = entry
                logger.debug("define forward-declared function %s", mangle_label(name, entry.param_types))
                return
            raise DeclarationConflict(f"Function {name} has already been declared")
        entries.append(entry)
        self._table[name] = entries
        logger.debug("declare function %s", mangle_label(name, entry.param_types))

    def get_variable(self, name: str) -> VariableEntry:
        """Look `name` up in this scope only."""
        for item in self._table.get(name, ()):
            if isinstance(item, VariableEntry):
                return item
        raise UndeclaredName(f"Variable {name} has not been declared")

    def lookup_variable(self, name: str) -> VariableEntry:
        """Walk this scope and its parents until `name` is found."""
        scope: Optional[SymbolTable] = self
        while scope is not None:
            try:
                return scope.get_variable(name)
            except UndeclaredName:
                scope = scope.parent
        raise UndeclaredName(f"Variable {name} has not been declared")

    def get_function(self, name: str, arg_types: Sequence[Type]) -> FunctionEntry:
        """Resolve an overload by exact parameter types in the global scope."""
        wanted = tuple(arg_types)
        for item in self.root._table.get(name, ()):
            if isinstance(item, FunctionEntry) and item.param_types == wanted:
                return item
        raise UndeclaredName(f"Function {name} has not been declared")
