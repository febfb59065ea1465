# ndfsm/runtime/timers.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class TimeSource(Protocol):
    """
    Protocol for obtaining the current time in milliseconds. Allows custom time
    sources to be plugged into timer conditions.
    """

    def now(self) -> float: ...


class MonotonicTimeSource:
    """
    Milliseconds from the monotonic clock. Unaffected by wall clock changes.
    """

    def now(self) -> float:
        return time.monotonic() * 1000.0


class ManualTimeSource:
    """
    A clock that only moves when told to. Useful for driving timer conditions
    deterministically, e.g. from a simulation tick or from tests.
    """

    def __init__(self, start: float = 0.0) -> None:
        """
        :param start: Initial time in milliseconds.
        """
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, milliseconds: float) -> None:
        """
        Move the clock forward.

        :param milliseconds: Amount to move; must not be negative.
        """
        if milliseconds < 0:
            raise ValueError("Time cannot move backwards")
        self._now += milliseconds
