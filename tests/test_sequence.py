"""Tests for ReactiveList."""

import pytest

from stashfx import (
    MutationDisabledError,
    Observable,
    ReactiveList,
    ReactiveObject,
    ReactivityMode,
    add_watcher,
    drain_queue,
    observe,
    pending_count,
    raw_observable,
    set_mode,
)


def _structural_log(state, path="items"):
    log = []
    add_watcher(state, path, lambda value, old: log.append(list(value)))
    return log


class TestReads:
    def test_behaves_like_a_list(self):
        state = observe({"items": [1, 2, 3]})
        items = state.items
        assert len(items) == 3
        assert items[0] == 1
        assert items[-1] == 3
        assert items[1:] == [2, 3]
        assert list(items) == [1, 2, 3]
        assert 2 in items
        assert items.index(3) == 2
        assert items == [1, 2, 3]
        assert repr(items) == "ReactiveList([1, 2, 3])"

    def test_attached_to_field_observable(self):
        state = observe({"items": []})
        assert state.items.observable is raw_observable(state, "items")

    def test_elements_have_their_own_observables(self):
        state = observe({"items": ["a", "b"]})
        first = raw_observable(state.items, 0)
        assert isinstance(first, Observable)
        assert first is not raw_observable(state.items, 1)
        assert first is not state.items.observable


class TestStructuralOperations:
    def test_append_makes_element_reactive_and_notifies_once(self):
        state = observe({"items": []})
        log = _structural_log(state)

        state.items.append({"name": "first"})
        assert isinstance(state.items[0], ReactiveObject)
        assert log == [[{"name": "first"}]]

        names = []
        add_watcher(state, "items.0.name", lambda value, old: names.append(value))
        state.items[0].name = "renamed"
        assert names == ["renamed"]
        assert len(log) == 1  # element writes are not structural

    def test_extend_notifies_once(self):
        state = observe({"items": [0]})
        log = _structural_log(state)
        state.items.extend([{"n": 1}, {"n": 2}, {"n": 3}])
        assert len(log) == 1
        assert all(isinstance(item, ReactiveObject) for item in state.items[1:])

    def test_returns_native_results(self):
        state = observe({"items": [3, 1, 2]})
        items = state.items
        assert items.append(4) is None
        assert items.pop() == 4
        assert items.pop(0) == 3
        items.insert(0, 9)
        assert items == [9, 1, 2]
        items.remove(1)
        assert items == [9, 2]
        items.sort()
        assert items == [2, 9]
        items.reverse()
        assert items == [9, 2]
        items.clear()
        assert items == []

    def test_every_structural_operation_notifies(self):
        state = observe({"items": [5, 4, 3, 2, 1]})
        log = _structural_log(state)
        items = state.items

        items.append(0)
        items.pop()
        items.pop(0)
        items.insert(0, 7)
        items.remove(7)
        items.sort()
        items.reverse()
        items[0:1] = [10, 11]
        del items[0]
        items.clear()

        assert len(log) == 10
        assert log[-1] == []

    def test_notifies_even_when_contents_are_unchanged(self):
        state = observe({"items": [1, 2, 3]})
        log = _structural_log(state)
        state.items.sort()
        assert log == [[1, 2, 3]]

    def test_insert_at_start_makes_element_reactive(self):
        state = observe({"items": [{"n": 1}]})
        state.items.insert(0, {"n": 0})
        assert isinstance(state.items[0], ReactiveObject)
        assert state.items == [{"n": 0}, {"n": 1}]

    def test_equal_elements_stay_distinct_after_insert(self):
        state = observe({"items": [{"x": 1}]})
        state.items.insert(0, {"x": 1})
        first, second = state.items[0], state.items[1]
        assert first is not second

        first.x = 5
        assert second.x == 1
        assert state.items == [{"x": 5}, {"x": 1}]

    def test_reverse_moves_equal_elements(self):
        state = observe({"items": [{"x": 1}, {"x": 1}]})
        a, b = state.items[0], state.items[1]
        state.items.reverse()
        assert state.items[0] is b
        assert state.items[1] is a

    def test_slice_assignment_splices(self):
        state = observe({"items": [1, 2, 3, 4]})
        log = _structural_log(state)
        state.items[1:3] = [{"a": 1}, {"b": 2}, {"c": 3}]
        assert state.items == [1, {"a": 1}, {"b": 2}, {"c": 3}, 4]
        assert all(isinstance(state.items[i], ReactiveObject) for i in (1, 2, 3))
        assert len(log) == 1

    def test_nested_list_elements(self):
        state = observe({"matrix": []})
        state.matrix.append([1, 2])
        row = state.matrix[0]
        assert isinstance(row, ReactiveList)
        assert row.observable is raw_observable(state.matrix, 0)

        log = []
        add_watcher(state, "matrix.0", lambda value, old: log.append(list(value)))
        row.append(3)
        assert log == [[1, 2, 3]]

    def test_positions_keep_their_observables(self):
        state = observe({"items": ["a", "b"]})
        first = raw_observable(state.items, 0)
        log = []
        add_watcher(state, "items.0", lambda value, old: log.append((value, old)))

        state.items.insert(0, "z")
        assert raw_observable(state.items, 0) is first
        assert log == [("z", "a")]

    def test_pop_drops_trailing_cells(self):
        state = observe({"items": [1, 2]})
        state.items.pop()
        assert raw_observable(state.items, 1) is None

    def test_computed_over_list_recomputes(self):
        state = observe({
            "workers": [],
            "head_count": lambda self: len(self.workers),
            "total_age": lambda self: sum(w.age for w in self.workers),
        })
        assert state.head_count == 0
        state.workers.append({"age": 30})
        state.workers.append({"age": 40})
        assert state.head_count == 2
        assert state.total_age == 70

        state.workers[0].age = 31
        assert state.total_age == 71


class TestElementWrites:
    def test_index_assignment_is_a_field_write(self):
        state = observe({"items": [1, 2]})
        structural = _structural_log(state)
        element = []
        add_watcher(state, "items.1", lambda value, old: element.append((value, old)))

        state.items[1] = 5
        state.items[1] = 5
        assert element == [(5, 2)]
        assert structural == []

    def test_assigned_element_is_made_reactive(self):
        state = observe({"items": [None]})
        state.items[0] = {"k": "v"}
        assert isinstance(state.items[0], ReactiveObject)


class TestModes:
    def test_disabled_raises_and_leaves_list_unchanged(self):
        state = observe({"items": [1, 2]})
        set_mode(ReactivityMode.DISABLED)
        with pytest.raises(MutationDisabledError):
            state.items.append(3)
        with pytest.raises(MutationDisabledError):
            state.items.sort()
        with pytest.raises(MutationDisabledError):
            state.items[0] = 9
        set_mode(ReactivityMode.ENABLED)
        assert state.items == [1, 2]

    def test_lazy_queues_operations(self):
        state = observe({"items": [3, 1]})
        log = _structural_log(state)
        set_mode(ReactivityMode.LAZY)

        assert state.items.append(2) is None
        state.items.sort(reverse=True)
        assert state.items == [3, 1]
        assert pending_count() == 2
        assert log == []

        drain_queue()
        assert state.items == [3, 2, 1]
        assert len(log) == 2
