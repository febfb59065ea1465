# ndfsm/core/actions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import Callable, Iterator, List, Union

from ndfsm.core.errors import ValidationError

logger = logging.getLogger(__name__)

Action = Callable[[], None]


class Actions:
    """
    An ordered chain of zero-argument callables. Used for state entry and exit
    actions and for the actions of a transition.

    Executing the chain runs every action in registration order. Failures are
    not caught here; they propagate to whoever executes the chain.
    """

    def __init__(self, *actions: Union[Action, "Actions"]) -> None:
        """
        :param actions: Callables or other chains, added in order.
        """
        self._items: List[Action] = []
        self.add(*actions)

    def add(self, *actions: Union[Action, "Actions"]) -> "Actions":
        """
        Append actions. Another Actions chain is flattened into this one.

        :param actions: Callables or chains to append.
        :raises ValidationError: If an action is None or not callable.
        :return: This chain, for chaining calls.
        """
        for action in actions:
            if action is None:
                raise ValidationError("Action cannot be None")
            if isinstance(action, Actions):
                self._items.extend(action._items)
            elif callable(action):
                self._items.append(action)
            else:
                raise ValidationError(f"Action must be callable, got {action!r}")
        return self

    def remove(self, action: Action) -> None:
        """Remove the first occurrence of an action."""
        self._items.remove(action)

    def execute(self) -> None:
        """
        Run all actions in order.
        """
        for action in self._items:
            action()

    def __iter__(self) -> Iterator[Action]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __str__(self) -> str:
        if not self._items:
            return "nothing"
        if len(self._items) == 1:
            return _describe(self._items[0])
        return "[" + ", ".join(_describe(item) for item in self._items) + "]"


def _describe(action: Action) -> str:
    # plain functions print as their name, action objects through __str__
    name = getattr(action, "__name__", None)
    return name if name else str(action)


class LogAction:
    """
    Logs a line of text at INFO level when executed.
    """

    def __init__(self, text: str) -> None:
        if text is None:
            raise ValidationError("Log text cannot be None")
        self._text = text

    @property
    def text(self) -> str:
        return self._text

    def __call__(self) -> None:
        logger.info(self._text)

    def __str__(self) -> str:
        return f"log {self._text!r}"


class NoAction:
    """An action that does nothing."""

    def __call__(self) -> None:
        pass

    def __str__(self) -> str:
        return "nothing"


NO_ACTION = NoAction()
