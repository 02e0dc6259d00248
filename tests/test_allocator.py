import pytest

from cmmc.allocator import AddressAllocator, ScopeTag


def test_addresses_use_scope_prefix():
    alloc = AddressAllocator()
    assert alloc.new_address(ScopeTag.GLOBAL) == "$0"
    assert alloc.new_address(ScopeTag.LOCAL) == "@0"
    assert alloc.new_address(ScopeTag.PARAM) == "%0"
    assert alloc.new_temporary() == "&0"
    assert alloc.new_temporary() == "&1"


def test_reset_function_keeps_globals_and_constants():
    alloc = AddressAllocator()
    alloc.new_address(ScopeTag.GLOBAL)
    alloc.new_address(ScopeTag.LOCAL)
    alloc.new_temporary()
    alloc.add_constant('"a"')
    alloc.reset_function()
    assert alloc.count(ScopeTag.LOCAL) == 0
    assert alloc.count(ScopeTag.TEMPORARY) == 0
    assert alloc.count(ScopeTag.GLOBAL) == 1
    assert alloc.add_constant('"b"') == "?1"


def test_constants_are_not_deduplicated():
    alloc = AddressAllocator()
    assert alloc.add_constant('"x"') == "?0"
    assert alloc.add_constant('"x"') == "?1"
    assert list(alloc.constants) == ['"x"', '"x"']


def test_labels_are_unique():
    alloc = AddressAllocator()
    assert [alloc.new_label() for _ in range(3)] == ["~0", "~1", "~2"]
    alloc.reset_function()
    assert alloc.new_label() == "~3"


def test_constant_slots_need_a_value():
    with pytest.raises(ValueError):
        AddressAllocator().new_slot(ScopeTag.CONST)
