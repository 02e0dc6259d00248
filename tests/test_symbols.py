import pytest

from cmmc.allocator import ScopeTag
from cmmc.ast_nodes import BOOL_TYPE, INT_TYPE, Type
from cmmc.errors import DeclarationConflict, UndeclaredName
from cmmc.symbols import FunctionEntry, SymbolTable, VariableEntry, mangle_label


def test_duplicate_variable_keeps_first():
    scope = SymbolTable()
    scope.add_entry("x", VariableEntry(INT_TYPE))
    with pytest.raises(DeclarationConflict):
        scope.add_entry("x", VariableEntry(BOOL_TYPE))
    assert scope.get_variable("x").type == INT_TYPE


def test_lookup_walks_parents_and_shadowing():
    root = SymbolTable()
    root.add_entry("x", VariableEntry(INT_TYPE))
    inner = root.child().child()
    assert inner.lookup_variable("x").type == INT_TYPE
    inner.add_entry("x", VariableEntry(BOOL_TYPE))
    assert inner.lookup_variable("x").type == BOOL_TYPE
    assert inner.root is root
    with pytest.raises(UndeclaredName):
        inner.get_variable("y")


def test_overloads_resolve_by_exact_params():
    root = SymbolTable()
    root.add_entry("f", FunctionEntry(INT_TYPE, (INT_TYPE,)))
    root.add_entry("f", FunctionEntry(BOOL_TYPE, (BOOL_TYPE,)))
    assert root.get_function("f", [BOOL_TYPE]).return_type == BOOL_TYPE
    with pytest.raises(UndeclaredName):
        root.get_function("f", [INT_TYPE, INT_TYPE])


def test_functions_are_found_from_nested_scopes():
    root = SymbolTable()
    root.add_entry("f", FunctionEntry(INT_TYPE, ()))
    assert root.child().get_function("f", []).return_type == INT_TYPE


def test_forward_declaration_is_completed_once():
    root = SymbolTable()
    root.add_entry("f", FunctionEntry(INT_TYPE, (INT_TYPE,), forward=True))
    root.add_entry("f", FunctionEntry(INT_TYPE, (INT_TYPE,)))
    assert root.get_function("f", [INT_TYPE]).forward is False
    with pytest.raises(DeclarationConflict):
        root.add_entry("f", FunctionEntry(INT_TYPE, (INT_TYPE,)))


def test_function_clashes_with_variable():
    root = SymbolTable()
    root.add_entry("f", VariableEntry(INT_TYPE))
    with pytest.raises(DeclarationConflict):
        root.add_entry("f", FunctionEntry(INT_TYPE, ()))


def test_array_size_does_not_affect_signature():
    root = SymbolTable()
    root.add_entry("f", FunctionEntry(INT_TYPE, (Type("int", 0, 10),)))
    assert root.get_function("f", [Type("int", 0, 3)])


def test_variable_address():
    assert VariableEntry(INT_TYPE, 2, ScopeTag.LOCAL).address == "@2"
    assert VariableEntry(INT_TYPE).address == ""


def test_mangle_label():
    assert mangle_label("fact", [INT_TYPE]) == "fact_int"
    assert mangle_label("main", []) == "main"
