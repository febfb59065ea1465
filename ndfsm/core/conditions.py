# ndfsm/core/conditions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Guards for transitions.

Every condition offers the same three operations: handle_event, is_met and
reset. There are two kinds. Event-based conditions start unmet and latch to
met when they see a matching event; they stay met until reset. The others
compute is_met from the outside world (the clock, another machine) and ignore
events.

A transition's conditions are reset each time its source state is entered.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Hashable, Iterator, List, Optional, Protocol, runtime_checkable

from ndfsm.core.errors import ValidationError
from ndfsm.runtime.timers import MonotonicTimeSource, TimeSource

if TYPE_CHECKING:
    from ndfsm.core.state_machine import StateMachine


@runtime_checkable
class Condition(Protocol):
    """
    Protocol for transition guards.

    Runtime Invariants:
    - is_met does not change the active states of any machine
    - reset is called whenever the owning transition's source state is entered
    """

    def handle_event(self, event: Any) -> None: ...

    def is_met(self) -> bool: ...

    def reset(self) -> None: ...


class _EventLatch:
    """
    Internal helper holding the sticky met flag of event-based conditions.
    """

    def __init__(self, matches: Callable[[Any], bool]) -> None:
        self._matches = matches
        self.met = False

    def handle(self, event: Any) -> None:
        if not self.met and self._matches(event):
            self.met = True

    def clear(self) -> None:
        self.met = False


# -----------------------------------------------------------------------------
# NON-EVENT-BASED CONDITIONS
# -----------------------------------------------------------------------------


class AlwaysCondition:
    """This condition is always met."""

    def handle_event(self, event: Any) -> None:
        pass

    def is_met(self) -> bool:
        return True

    def reset(self) -> None:
        pass

    def __str__(self) -> str:
        return "always"


class NeverCondition:
    """
    This condition is never met, and as such blocks a transition from ever
    firing. Mostly useful in tests.
    """

    def handle_event(self, event: Any) -> None:
        pass

    def is_met(self) -> bool:
        return False

    def reset(self) -> None:
        pass

    def __str__(self) -> str:
        return "never"


class AfterCondition:
    """
    Met once a number of milliseconds has passed since the last reset.
    """

    def __init__(self, milliseconds: float, time_source: Optional[TimeSource] = None) -> None:
        """
        :param milliseconds: Delay after reset before the condition is met.
        :param time_source: Clock to read; defaults to the monotonic clock.
        """
        if milliseconds is None or milliseconds < 0:
            raise ValidationError(f"Delay must be a non-negative number of milliseconds, got {milliseconds!r}")
        self._milliseconds = milliseconds
        self._time_source = time_source or MonotonicTimeSource()
        self._deadline = self._time_source.now() + milliseconds

    @property
    def milliseconds(self) -> float:
        return self._milliseconds

    @property
    def deadline(self) -> float:
        """The time after which the condition is met."""
        return self._deadline

    def handle_event(self, event: Any) -> None:
        pass

    def is_met(self) -> bool:
        return self._time_source.now() > self._deadline

    def reset(self) -> None:
        self._deadline = self._time_source.now() + self._milliseconds

    def __str__(self) -> str:
        return f"after {self._milliseconds:g} ms"


class StatesActiveCondition:
    """
    Met when all given states are active in a machine.
    """

    def __init__(self, machine: "StateMachine", *states: Hashable) -> None:
        if machine is None:
            raise ValidationError("State machine cannot be None")
        self._machine = machine
        self._states = frozenset(states)

    def handle_event(self, event: Any) -> None:
        pass

    def is_met(self) -> bool:
        return all(self._machine.is_active(state) for state in self._states)

    def reset(self) -> None:
        pass

    def __str__(self) -> str:
        return "active " + " ".join(sorted(str(state) for state in self._states))


class StatesInactiveCondition:
    """
    Met when none of the given states is active in a machine.
    """

    def __init__(self, machine: "StateMachine", *states: Hashable) -> None:
        if machine is None:
            raise ValidationError("State machine cannot be None")
        self._machine = machine
        self._states = frozenset(states)

    def handle_event(self, event: Any) -> None:
        pass

    def is_met(self) -> bool:
        return not any(self._machine.is_active(state) for state in self._states)

    def reset(self) -> None:
        pass

    def __str__(self) -> str:
        return "inactive " + " ".join(sorted(str(state) for state in self._states))


# -----------------------------------------------------------------------------
# EVENT-BASED CONDITIONS
# -----------------------------------------------------------------------------


class SingleEventMatchCondition:
    """
    Met once an event equal to the given one has been handled since the last
    reset.
    """

    def __init__(self, event: Any) -> None:
        if event is None:
            raise ValidationError("Event to match cannot be None")
        self._event = event
        self._latch = _EventLatch(lambda e: e == self._event)

    @property
    def event(self) -> Any:
        return self._event

    def handle_event(self, event: Any) -> None:
        self._latch.handle(event)

    def is_met(self) -> bool:
        return self._latch.met

    def reset(self) -> None:
        self._latch.clear()

    def __str__(self) -> str:
        return f"is {self._event}"


class MultiEventMatchCondition:
    """
    Met once any one of the given events has been handled since the last reset.
    Events must be hashable.
    """

    def __init__(self, *events: Hashable) -> None:
        if not events:
            raise ValidationError("At least one event to match is required")
        if any(event is None for event in events):
            raise ValidationError("Event to match cannot be None")
        self._events = frozenset(events)
        self._latch = _EventLatch(self._matches)

    @property
    def events(self) -> frozenset:
        return self._events

    def _matches(self, event: Any) -> bool:
        try:
            return event in self._events
        except TypeError:
            # unhashable events can never be in the match set
            return False

    def handle_event(self, event: Any) -> None:
        self._latch.handle(event)

    def is_met(self) -> bool:
        return self._latch.met

    def reset(self) -> None:
        self._latch.clear()

    def __str__(self) -> str:
        return "one of (" + " ".join(sorted(str(event) for event in self._events)) + ")"


class SubStateMachineCondition:
    """
    Uses another state machine as a condition. Events are forwarded into the
    embedded machine, and the condition is met once that machine is finished.

    The embedded machine is not copied: using one machine in several conditions
    shares its state between them. It must not be the machine that owns this
    condition.
    """

    def __init__(self, machine: "StateMachine") -> None:
        if machine is None:
            raise ValidationError("State machine cannot be None")
        self._machine = machine
        self._latch = _EventLatch(self._forward)

    @property
    def machine(self) -> "StateMachine":
        return self._machine

    def _forward(self, event: Any) -> bool:
        self._machine.handle_event(event)
        return self._machine.is_finished()

    def handle_event(self, event: Any) -> None:
        self._latch.handle(event)

    def is_met(self) -> bool:
        return self._latch.met

    def reset(self) -> None:
        self._latch.clear()
        self._machine.reset()

    def __str__(self) -> str:
        return "sub state machine"


# -----------------------------------------------------------------------------
# CONJUNCTION
# -----------------------------------------------------------------------------


class Conditions:
    """
    The conjunction of conditions held by a transition. An empty chain is
    always met.
    """

    def __init__(self, *conditions: Condition) -> None:
        self._items: List[Condition] = []
        self.add(*conditions)

    def add(self, *conditions: Condition) -> "Conditions":
        """
        Append conditions. Another Conditions chain is flattened into this one.

        :raises ValidationError: If a condition is None.
        """
        for condition in conditions:
            if condition is None:
                raise ValidationError("Condition cannot be None")
            if isinstance(condition, Conditions):
                self._items.extend(condition._items)
            else:
                self._items.append(condition)
        return self

    def handle_event(self, event: Any) -> None:
        for condition in self._items:
            condition.handle_event(event)

    def is_met(self) -> bool:
        """
        :return: True if all conditions are met, else False.
        """
        for condition in self._items:
            if not condition.is_met():
                return False
        return True

    def reset(self) -> None:
        for condition in self._items:
            condition.reset()

    def __iter__(self) -> Iterator[Condition]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __str__(self) -> str:
        if not self._items:
            return "always"
        if len(self._items) == 1:
            return str(self._items[0])
        return "[" + ", ".join(str(item) for item in self._items) + "]"
