# ndfsm/core/transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Any, Hashable

from ndfsm.core.actions import Actions
from ndfsm.core.conditions import Conditions
from ndfsm.core.errors import ValidationError


class Transition:
    """
    A guarded, prioritized edge from a source state to a destination state.
    When its source state is active and all of its conditions are met, the
    transition fires: the source state is exited, the actions run and the
    destination state is entered.

    Transitions are immutable, compare by identity and sort by priority.
    """

    __slots__ = ("_source", "_destination", "_conditions", "_priority", "_actions")

    def __init__(
        self,
        source: Hashable,
        destination: Hashable,
        conditions: Conditions,
        priority: Any,
        actions: Actions,
    ) -> None:
        """
        :param source: The state that must be active for this transition to fire.
        :param destination: The state entered when this transition fires.
        :param conditions: Conditions that must all be met; may be empty.
        :param priority: Any comparable value; lower values fire first.
        :param actions: Actions executed when the transition fires; may be empty.
        :raises ValidationError: If any argument is None.
        """
        for name, value in (
            ("source", source),
            ("destination", destination),
            ("conditions", conditions),
            ("priority", priority),
            ("actions", actions),
        ):
            if value is None:
                raise ValidationError(f"Transition {name} cannot be None")
        object.__setattr__(self, "_source", source)
        object.__setattr__(self, "_destination", destination)
        object.__setattr__(self, "_conditions", conditions)
        object.__setattr__(self, "_priority", priority)
        object.__setattr__(self, "_actions", actions)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Transition is immutable")

    @property
    def source(self) -> Hashable:
        """The state that must be active for this transition to fire."""
        return self._source

    @property
    def destination(self) -> Hashable:
        """The state that will be entered when this transition fires."""
        return self._destination

    @property
    def conditions(self) -> Conditions:
        """The conditions that must all be met for this transition to fire."""
        return self._conditions

    @property
    def priority(self) -> Any:
        """
        If this transition fires, no lower priority transitions for the same
        source state fire in the same round.
        """
        return self._priority

    @property
    def actions(self) -> Actions:
        """The actions executed when this transition fires. Never None."""
        return self._actions

    def __lt__(self, other: "Transition") -> bool:
        if not isinstance(other, Transition):
            return NotImplemented
        return self._priority < other._priority

    def __repr__(self) -> str:
        return (
            f"Transition from {self._source} to {self._destination}, condition {self._conditions}, "
            f"action {self._actions}, priority {self._priority}"
        )
