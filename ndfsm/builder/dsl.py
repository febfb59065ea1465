# ndfsm/builder/dsl.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
A fluent builder for state machines.

    builder = DslBuilder(Priority.NORMAL)
    builder.state(LOADER).is_a_start_state().when(DONE).then(INTRO)
    builder.state(INTRO).when(DONE).then(MENU)
    builder.state(MENU).when(START).then(GET_READY).when(ESCAPE).then(EXIT)
    builder.states(*GameState).except_(MENU, LOADER, EXIT).when(ESCAPE).then(MENU)
    builder.state(EXIT).is_an_end_state()
    machine = builder.build()
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Hashable, Optional, Set

from ndfsm.core.actions import Action, Actions, LogAction
from ndfsm.core.conditions import (
    AfterCondition,
    AlwaysCondition,
    Condition,
    Conditions,
    MultiEventMatchCondition,
    NeverCondition,
    SingleEventMatchCondition,
    StatesActiveCondition,
    StatesInactiveCondition,
)
from ndfsm.core.errors import ValidationError
from ndfsm.core.state_machine import StateMachine
from ndfsm.core.transitions import Transition
from ndfsm.runtime.tasks import FinishableAction
from ndfsm.runtime.timers import TimeSource

logger = logging.getLogger(__name__)


def always() -> Condition:
    return AlwaysCondition()


def never() -> Condition:
    return NeverCondition()


def after(milliseconds: float, time_source: Optional[TimeSource] = None) -> Condition:
    return AfterCondition(milliseconds, time_source)


def is_(*events: Hashable) -> Conditions:
    """
    A condition matching one event, or any one of several.
    """
    if not events:
        raise ValidationError("At least one event to match is required")
    if len(events) == 1:
        return Conditions(SingleEventMatchCondition(events[0]))
    return Conditions(MultiEventMatchCondition(*events))


def log(text: str) -> Action:
    return LogAction(text)


def _is_condition(value: Any) -> bool:
    return isinstance(value, (Condition, Conditions, FinishableAction))


def _as_condition(value: Any) -> Any:
    if isinstance(value, (Condition, Conditions)):
        return value
    return value.finished


class DefiningState:
    """
    Describes one or more states. Returned by DslBuilder.state and states.
    """

    def __init__(self, builder: "DslBuilder", source_states: Set[Hashable]) -> None:
        self._builder = builder
        self._source_states = source_states

    @property
    def source_states(self) -> Set[Hashable]:
        return set(self._source_states)

    def except_(self, *states: Hashable) -> "DefiningState":
        """Leave states out of the selection."""
        for state in states:
            self._source_states.discard(state)
        return self

    def on_exit(self, *actions: Action) -> "DefiningState":
        for state in self._source_states:
            self._builder.machine.add_exit_actions(state, *actions)
        return self

    def on_entry(self, *actions: Action) -> "DefiningState":
        for state in self._source_states:
            self._builder.machine.add_entry_actions(state, *actions)
        return self

    def is_an_end_state(self) -> "DefiningState":
        for state in self._source_states:
            self._builder.machine.add_end_state(state)
        return self

    def is_a_start_state(self) -> "DefiningState":
        for state in self._source_states:
            self._builder.machine.add_start_state(state)
        return self

    def are_end_states(self) -> "DefiningState":
        return self.is_an_end_state()

    def are_start_states(self) -> "DefiningState":
        return self.is_a_start_state()

    def when(self, *conditions_or_events: Any) -> "DefiningTransition":
        """
        Start a transition. Pass either conditions, which must all be met, or
        events, of which any one triggers it. Nothing at all means always.
        A finishable action, like a TaskAction, counts as the condition that
        it has finished.
        """
        if any(value is None for value in conditions_or_events):
            raise ValidationError("Condition or event cannot be None")
        conditions = [_as_condition(value) for value in conditions_or_events if _is_condition(value)]
        if not conditions and conditions_or_events:
            return DefiningTransition(self._builder, self._source_states, lambda: is_(*conditions_or_events))
        if len(conditions) != len(conditions_or_events):
            raise ValidationError("Cannot mix conditions and events in one when()")
        # Condition objects are used as given, so a selection of several
        # states shares them.
        return DefiningTransition(self._builder, self._source_states, lambda: Conditions(*conditions))


class DefiningTransition:
    """
    Describes a transition from the selected states. Finished by then() or
    transition().
    """

    def __init__(
        self,
        builder: "DslBuilder",
        source_states: Set[Hashable],
        make_conditions: Callable[[], Conditions],
    ) -> None:
        self._builder = builder
        self._source_states = source_states
        self._make_conditions = make_conditions
        self._actions = Actions()
        self._priority = builder.default_priority

    def action(self, action: Action) -> "DefiningTransition":
        if action is None:
            raise ValidationError("Action cannot be None")
        self._actions.add(action)
        return self

    def with_prio(self, priority: Any) -> "DefiningTransition":
        if priority is None:
            raise ValidationError("Priority cannot be None")
        self._priority = priority
        return self

    def then(self, destination: Hashable) -> DefiningState:
        """
        Finish the transition, going to destination.
        """
        if destination is None:
            raise ValidationError("Destination state cannot be None")
        return self._add(destination, self._make_conditions, self._priority, self._actions)

    def transition(
        self, destination: Hashable, condition: Condition, priority: Any, *actions: Action
    ) -> DefiningState:
        """
        Finish the transition with an explicit condition, priority and actions.
        The condition replaces whatever was given to when().
        """
        if condition is None:
            raise ValidationError("Condition cannot be None")
        return self._add(destination, lambda: Conditions(condition), priority, Actions(self._actions, *actions))

    def _add(
        self,
        destination: Hashable,
        make_conditions: Callable[[], Conditions],
        priority: Any,
        actions: Actions,
    ) -> DefiningState:
        for source_state in self._source_states:
            self._builder.machine.add_transition(
                Transition(source_state, destination, make_conditions(), priority, Actions(actions))
            )
        return DefiningState(self._builder, set(self._source_states))


class DslBuilder:
    """
    Builds a state machine through a readable chain of calls.
    """

    def __init__(self, default_priority: Any, machine: Optional[StateMachine] = None) -> None:
        """
        :param default_priority: Priority of transitions that do not set one.
        :param machine: Machine to add to; a new one is created if omitted.
        """
        if default_priority is None:
            raise ValidationError("Default priority cannot be None")
        self._default_priority = default_priority
        self._machine = machine if machine is not None else StateMachine()

    @property
    def default_priority(self) -> Any:
        return self._default_priority

    @property
    def machine(self) -> StateMachine:
        return self._machine

    def build(self) -> StateMachine:
        """
        :return: The machine that was built.
        """
        logger.debug("Built machine with start states %s", self._machine.get_start_states())
        return self._machine

    def state(self, state: Hashable) -> DefiningState:
        if state is None:
            raise ValidationError("State cannot be None")
        return self.states(state)

    def states(self, *states: Hashable) -> DefiningState:
        if any(state is None for state in states):
            raise ValidationError("State cannot be None")
        return DefiningState(self, set(states))

    def active(self, *states: Hashable) -> Condition:
        """A condition met when all states are active in the machine being built."""
        return StatesActiveCondition(self._machine, *states)

    def inactive(self, *states: Hashable) -> Condition:
        """A condition met when none of the states is active in the machine being built."""
        return StatesInactiveCondition(self._machine, *states)
