# ndfsm/core/priority.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from enum import IntEnum


class Priority(IntEnum):
    """
    Ready-made priority levels for transitions. Lower values fire first, and
    once a level fires for a source state, lower levels of that state are not
    considered in the same round.
    """

    HIGHEST = 0
    HIGH = 1
    NORMAL = 2
    LOW = 3
    LOWEST = 4


class PriorityCounter:
    """
    Hands out increasing integer priorities, so transitions created earlier
    always win over transitions created later. Use one counter per build.
    """

    def __init__(self, start: int = 0) -> None:
        self._next = start

    def next_priority(self) -> int:
        priority = self._next
        self._next += 1
        return priority
