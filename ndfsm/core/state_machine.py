# ndfsm/core/state_machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from operator import attrgetter
from typing import Any, Dict, FrozenSet, Hashable, Iterator, List, Optional, Set, Tuple

from ndfsm.core.actions import Action, Actions
from ndfsm.core.errors import ReentrancyError, ValidationError
from ndfsm.core.transitions import Transition

logger = logging.getLogger(__name__)

_UNSET = object()


class StateMachine:
    """
    A non-deterministic finite state machine with any number of start, active
    and end states.

    - States, events and priorities can be any type. States and events must be
      hashable and comparable for equality; priorities must be ordered.
    - Several states can be active at once, and states with their transitions
      do not have to form a single graph.
    - Each state has a chain of entry and exit actions, each transition a chain
      of actions.
    - Transitions have priorities. Per source state, the highest priority with
      a met condition fires, together with all other met transitions of that
      same priority.
    - Nothing is compiled or validated ahead of time.

    The machine is not thread-safe. One caller drives reset, handle_event and
    poll; none of them may be called again on the same machine while it is
    running one of them.

    Exceptions raised by conditions or actions while the machine runs are
    passed to the on_error hooks and then re-raised unchanged.
    """

    def __init__(self, hooks: Optional[List[Any]] = None) -> None:
        """
        Create an empty state machine. Fill it through the add_* methods or with
        one of the builders.

        :param hooks: Optional objects implementing any of on_enter(state),
            on_exit(state), on_transition(transition) and on_error(error).
        """
        self._start_states: Set[Hashable] = set()
        self._end_states: Set[Hashable] = set()
        self._active_states: Set[Hashable] = set()
        self._entry_actions: Dict[Hashable, Actions] = {}
        self._exit_actions: Dict[Hashable, Actions] = {}
        self._transitions: Dict[Hashable, List[Transition]] = {}
        self._hooks: List[Any] = list(hooks or [])
        self._busy: Optional[str] = None
        logger.debug("New machine")

    # -------------------------------------------------------------------------
    # Runtime
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """
        Make the start states the only active states, running their entry
        actions and resetting the conditions of their transitions.
        """
        with self._evaluating("reset"):
            logger.debug("reset()")
            if not self._start_states:
                logger.warning("State machine does not contain any start states.")
            self._active_states.clear()
            try:
                for start_state in list(self._start_states):
                    self._enter_state(start_state)
            except Exception as error:
                self._notify_error(error)
                raise

    def get_active_states(self) -> Set[Hashable]:
        """
        :return: A copy of the set of active states.
        """
        return set(self._active_states)

    def is_active(self, state: Hashable) -> bool:
        """
        :return: Whether the state is currently active.
        """
        return state in self._active_states

    def is_finished(self) -> bool:
        """
        :return: Whether no states are active. Either all active states have
            moved into end states, or there were no start states at all.
        """
        return not self._active_states

    def handle_event(self, event: Any) -> None:
        """
        Handle an event coming from the application. The event is passed to the
        conditions of all transitions with an active source state, then poll()
        is run.

        :param event: Something that has happened.
        :raises ReentrancyError: If called while this machine is evaluating.
        """
        with self._evaluating("handle_event"):
            logger.debug("handle event %s", event)
            try:
                for source_state in list(self._active_states):
                    for transition in self._transitions.get(source_state, ()):
                        transition.conditions.handle_event(event)
            except Exception as error:
                self._notify_error(error)
                raise
            self._poll()

    def poll(self) -> None:
        """
        Look for transitions to fire and fire them, until nothing fires anymore.
        Has to be called regularly for conditions that do not depend on events,
        like timers.

        Every round:

        1. For each active state, find the transitions that fire: skip those
           that already fired during this call, then take the first priority
           that has a met transition and all met transitions of that priority.
        2. Exit the source states of those transitions.
        3. Execute the actions of those transitions.
        4. Enter their destination states.

        Rounds repeat until one fires nothing. A transition fires at most once
        per call, so loops in the machine cannot make this run forever.

        :raises ReentrancyError: If called while this machine is evaluating.
        """
        with self._evaluating("poll"):
            self._poll()

    def _poll(self) -> None:
        fired: Set[Transition] = set()
        try:
            while self._poll_round(fired):
                pass
        except Exception as error:
            self._notify_error(error)
            raise

    def _poll_round(self, fired: Set[Transition]) -> bool:
        """
        Run one round of poll().

        :return: Whether any transition fired.
        """
        states_to_exit: Dict[Hashable, None] = {}
        transitions_to_fire: List[Transition] = []
        states_to_enter: Dict[Hashable, None] = {}

        for source_state in list(self._active_states):
            firing_priority = _UNSET
            for transition in self._transitions.get(source_state, ()):
                if transition in fired:
                    continue
                if firing_priority is not _UNSET and transition.priority != firing_priority:
                    # Only lower priorities left for this source state.
                    break
                if transition.conditions.is_met():
                    states_to_exit[source_state] = None
                    transitions_to_fire.append(transition)
                    states_to_enter[transition.destination] = None
                    firing_priority = transition.priority

        if not transitions_to_fire:
            return False

        for state in states_to_exit:
            self._exit_state(state)
        for transition in transitions_to_fire:
            fired.add(transition)
            logger.debug("fire %r", transition)
            self._notify("on_transition", transition)
            transition.actions.execute()
        for state in states_to_enter:
            self._enter_state(state)
        return True

    def _enter_state(self, state: Hashable) -> None:
        if state in self._end_states:
            logger.debug("enter end state %s", state)
            self._notify("on_enter", state)
            self._execute_actions(self._entry_actions.get(state))
            if not self._active_states:
                logger.debug("machine is finished")
            return
        if state not in self._active_states:
            logger.debug("enter state %s", state)
            self._active_states.add(state)
            self._notify("on_enter", state)
            self._execute_actions(self._entry_actions.get(state))
            for transition in self._transitions.get(state, ()):
                transition.conditions.reset()

    def _exit_state(self, state: Hashable) -> None:
        if state in self._active_states:
            logger.debug("exit state %s", state)
            self._notify("on_exit", state)
            self._execute_actions(self._exit_actions.get(state))
            self._active_states.discard(state)

    @staticmethod
    def _execute_actions(actions: Optional[Actions]) -> None:
        if actions is not None:
            actions.execute()

    @contextmanager
    def _evaluating(self, operation: str) -> Iterator[None]:
        if self._busy is not None:
            raise ReentrancyError(operation)
        self._busy = operation
        try:
            yield
        finally:
            self._busy = None

    # -------------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------------

    def add_hook(self, hook: Any) -> None:
        """
        Register an object implementing any of on_enter, on_exit, on_transition
        and on_error.
        """
        if hook is None:
            raise ValidationError("Hook cannot be None")
        self._hooks.append(hook)

    def _notify(self, method: str, argument: Any) -> None:
        for hook in self._hooks:
            if hasattr(hook, method):
                getattr(hook, method)(argument)

    def _notify_error(self, error: Exception) -> None:
        for hook in self._hooks:
            if hasattr(hook, "on_error"):
                hook.on_error(error)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def add_start_state(self, state: Hashable) -> None:
        """
        Add a start state, and immediately activate it. Its entry actions are
        not run until reset().
        """
        if state is None:
            raise ValidationError("Start state cannot be None")
        logger.debug("Add start state '%s'", state)
        self._start_states.add(state)
        self._active_states.add(state)

    def add_end_state(self, state: Hashable) -> None:
        """
        Add an end state. End states run their entry actions but never become
        active.
        """
        if state is None:
            raise ValidationError("End state cannot be None")
        logger.debug("Add end state '%s'", state)
        self._end_states.add(state)

    def add_transition(self, transition: Transition) -> None:
        """
        Add a transition. Transitions of a source state are kept in priority
        order; among equal priorities, earlier additions come first.
        """
        if not isinstance(transition, Transition):
            raise ValidationError(f"Expected a Transition, got {transition!r}")
        logger.debug(
            "Create transition from '%s' to '%s' (pre: '%s', action: '%s')",
            transition.source,
            transition.destination,
            transition.conditions,
            transition.actions,
        )
        bucket = self._transitions.setdefault(transition.source, [])
        bucket.append(transition)
        bucket.sort(key=attrgetter("priority"))

    def add_entry_actions(self, state: Hashable, *actions: Action) -> None:
        """
        Add actions to be executed when the state is entered.
        """
        logger.debug("Create entry action for '%s' (%s)", state, actions)
        self._entry_actions.setdefault(state, Actions()).add(*actions)

    def add_exit_actions(self, state: Hashable, *actions: Action) -> None:
        """
        Add actions to be executed when the state is exited.
        """
        logger.debug("Create exit action for '%s' (%s)", state, actions)
        self._exit_actions.setdefault(state, Actions()).add(*actions)

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def get_start_states(self) -> Set[Hashable]:
        return set(self._start_states)

    def get_end_states(self) -> Set[Hashable]:
        return set(self._end_states)

    def get_source_states(self) -> Set[Hashable]:
        """
        :return: The states that have outgoing transitions.
        """
        return set(self._transitions)

    def get_transitions_for_source_state(self, state: Hashable) -> List[Transition]:
        """
        :return: The outgoing transitions of a state in priority order; empty
            if it has none.
        """
        return list(self._transitions.get(state, ()))


@dataclass(frozen=True)
class MachineDescription:
    """
    A snapshot of the structure of a state machine, for exporters and other
    readers. Holds copies; changing the machine later does not affect it.
    """

    start_states: FrozenSet[Hashable]
    end_states: FrozenSet[Hashable]
    active_states: FrozenSet[Hashable]
    transitions: Dict[Hashable, Tuple[Transition, ...]]

    @property
    def source_states(self) -> FrozenSet[Hashable]:
        return frozenset(self.transitions)

    @property
    def states(self) -> FrozenSet[Hashable]:
        """Every state mentioned anywhere in the machine."""
        found = set(self.start_states) | set(self.end_states) | set(self.active_states)
        for source_state, transitions in self.transitions.items():
            found.add(source_state)
            found.update(transition.destination for transition in transitions)
        return frozenset(found)


def describe(machine: StateMachine) -> MachineDescription:
    """
    Take a read-only snapshot of a machine's states and transitions.
    """
    return MachineDescription(
        start_states=frozenset(machine.get_start_states()),
        end_states=frozenset(machine.get_end_states()),
        active_states=frozenset(machine.get_active_states()),
        transitions={
            source_state: tuple(machine.get_transitions_for_source_state(source_state))
            for source_state in machine.get_source_states()
        },
    )
