"""
Tests for generational handles.
"""

import pytest

from cocoharness.backends.handles import Handle, HandleArena
from cocoharness.exceptions import LifecycleError


class TestHandleArena:
    """Test insert / get / remove semantics."""

    def test_insert_and_get(self):
        arena = HandleArena("suite")
        handle = arena.insert("resource")

        assert handle.kind == "suite"
        assert arena.get(handle) == "resource"
        assert handle in arena
        assert len(arena) == 1

    def test_removed_handle_is_stale(self):
        arena = HandleArena("suite")
        handle = arena.insert("resource")

        assert arena.remove(handle) == "resource"
        assert handle not in arena
        with pytest.raises(LifecycleError):
            arena.get(handle)
        with pytest.raises(LifecycleError):
            arena.remove(handle)

    def test_slot_reuse_bumps_generation(self):
        arena = HandleArena("problem")
        old = arena.insert("first")
        arena.remove(old)
        new = arena.insert("second")

        assert new.slot == old.slot
        assert new.generation == old.generation + 1
        assert arena.get(new) == "second"
        with pytest.raises(LifecycleError):
            arena.get(old)

    def test_wrong_kind_rejected(self):
        arena = HandleArena("observer")
        arena.insert("resource")

        with pytest.raises(LifecycleError):
            arena.get(Handle("suite", 0, 0))
        assert Handle("suite", 0, 0) not in arena

    def test_handles_lists_live_resources(self):
        arena = HandleArena("problem")
        first = arena.insert("a")
        second = arena.insert("b")
        arena.remove(first)

        assert list(arena.handles()) == [second]

    def test_handle_str(self):
        assert str(Handle("suite", 3, 1)) == "suite#3.1"
