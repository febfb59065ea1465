# tests/unit/core/test_priority.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from ndfsm.core.priority import Priority, PriorityCounter


def test_priority_levels_are_ordered() -> None:
    assert Priority.HIGHEST < Priority.HIGH < Priority.NORMAL < Priority.LOW < Priority.LOWEST


def test_counter_hands_out_increasing_priorities() -> None:
    counter = PriorityCounter()
    assert [counter.next_priority() for _ in range(3)] == [0, 1, 2]


def test_counters_are_independent() -> None:
    first = PriorityCounter()
    second = PriorityCounter(start=10)
    first.next_priority()
    first.next_priority()
    assert second.next_priority() == 10
    assert first.next_priority() == 2
