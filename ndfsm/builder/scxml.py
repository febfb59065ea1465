# ndfsm/builder/scxml.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Reads state machines from SCXML (http://www.w3.org/TR/scxml/) documents.

Since the two models do not match well, only part of SCXML is understood:

- supported: normal, start (``initial``) and end (``final``) states
- interpreted by callbacks: onentry/onexit text, transition ``event`` (turned
  into an action) and ``cond`` (turned into a condition)
- flattened: compound and parallel states become plain states of one machine
- ignored: executable content, history, datamodel

Transitions get priorities in document order: earlier ones win.
"""

from __future__ import annotations

import logging
from typing import IO, Any, Callable, Hashable, Optional, Union

from lxml import etree

from ndfsm.core.actions import Action, Actions
from ndfsm.core.conditions import Condition, Conditions
from ndfsm.core.errors import ScxmlError
from ndfsm.core.priority import PriorityCounter
from ndfsm.core.state_machine import StateMachine
from ndfsm.core.transitions import Transition

logger = logging.getLogger(__name__)

ROOT_STATE_MACHINE_ELEMENT = "scxml"
STATE_ELEMENT = "state"
PARALLEL_ELEMENT = "parallel"
FINAL_STATE_ELEMENT = "final"
TRANSITION_ELEMENT = "transition"
ON_ENTRY_ELEMENT = "onentry"
ON_EXIT_ELEMENT = "onexit"

ID_ATTRIBUTE = "id"
INITIAL_ATTRIBUTE = "initial"
TARGET_ATTRIBUTE = "target"
EVENT_ATTRIBUTE = "event"
CONDITION_ATTRIBUTE = "cond"


def _identity(name: str) -> Hashable:
    return name


class ScxmlBuilder:
    """
    Builds a state machine from an SCXML document. How state names, events and
    conditions turn into Python objects is decided by the callbacks.
    """

    def __init__(
        self,
        source: Union[str, bytes, IO[Any]],
        interpret_event: Callable[[str], Action],
        interpret_condition: Callable[[str], Condition],
        interpret_state: Callable[[str], Hashable] = _identity,
        counter: Optional[PriorityCounter] = None,
    ) -> None:
        """
        :param source: A file name, a file object, or the document as bytes.
        :param interpret_event: Turns event attributes and onentry/onexit text
            into an action.
        :param interpret_condition: Turns a ``cond`` attribute into a condition.
        :param interpret_state: Turns a state id into a state; defaults to the id.
        :param counter: Priority counter for this build; a fresh one if omitted.
        """
        self._source = source
        self._interpret_event = interpret_event
        self._interpret_condition = interpret_condition
        self._interpret_state = interpret_state
        self._counter = counter or PriorityCounter()

    @classmethod
    def from_string(cls, text: Union[str, bytes], **kwargs: Any) -> "ScxmlBuilder":
        """Build from the document text instead of a file."""
        if isinstance(text, str):
            text = text.encode("utf-8")
        return cls(text, **kwargs)

    def build(self, machine: Optional[StateMachine] = None) -> StateMachine:
        """
        Parse the document and add its states and transitions to machine.

        :param machine: Machine to add to; a new one is created if omitted.
        :raises ScxmlError: If the document cannot be parsed.
        """
        machine = machine if machine is not None else StateMachine()
        root = self._parse_root()
        if _local_name(root) != ROOT_STATE_MACHINE_ELEMENT:
            raise ScxmlError(f"Expected <{ROOT_STATE_MACHINE_ELEMENT}> root element, got <{_local_name(root)}>")
        self._parse_state(root, machine)
        return machine

    def _parse_root(self) -> etree._Element:
        try:
            if isinstance(self._source, bytes):
                return etree.fromstring(self._source)
            return etree.parse(self._source).getroot()
        except (etree.XMLSyntaxError, OSError) as e:
            raise ScxmlError(f"Cannot read SCXML document: {e}") from e

    def _parse_state(self, element: etree._Element, machine: StateMachine) -> Optional[Hashable]:
        if element.get(INITIAL_ATTRIBUTE):
            for initial in element.get(INITIAL_ATTRIBUTE).split():
                machine.add_start_state(self._interpret_state(initial))

        is_root = _local_name(element) == ROOT_STATE_MACHINE_ELEMENT
        state_name = element.get(ID_ATTRIBUTE)
        state = self._interpret_state(state_name) if state_name is not None else None

        for child in element:
            if not isinstance(child.tag, str):
                # comments and processing instructions
                continue
            name = _local_name(child)
            if name in (STATE_ELEMENT, PARALLEL_ELEMENT, ROOT_STATE_MACHINE_ELEMENT):
                self._parse_state(child, machine)
            elif name == FINAL_STATE_ELEMENT:
                end_state = self._parse_state(child, machine)
                if end_state is None:
                    raise ScxmlError(f"<{FINAL_STATE_ELEMENT}> state without {ID_ATTRIBUTE}")
                machine.add_end_state(end_state)
            elif name not in (TRANSITION_ELEMENT, ON_ENTRY_ELEMENT, ON_EXIT_ELEMENT):
                continue
            elif is_root:
                logger.warning("Ignoring <%s> outside a state.", name)
            elif state is None:
                raise ScxmlError(f"<{_local_name(element)}> with <{name}> has no {ID_ATTRIBUTE}")
            elif name == TRANSITION_ELEMENT:
                self._parse_transition(child, state, state_name, machine)
            elif name == ON_ENTRY_ELEMENT:
                machine.add_entry_actions(state, self._interpret_event(_text(child)))
            else:
                machine.add_exit_actions(state, self._interpret_event(_text(child)))
        return state

    def _parse_transition(
        self, element: etree._Element, state: Hashable, state_name: str, machine: StateMachine
    ) -> None:
        target = element.get(TARGET_ATTRIBUTE)
        if not target:
            logger.warning("State %s has a transition going nowhere.", state_name)
            return
        conditions = Conditions()
        if element.get(CONDITION_ATTRIBUTE) is not None:
            conditions.add(self._interpret_condition(element.get(CONDITION_ATTRIBUTE)))
        actions = Actions()
        if element.get(EVENT_ATTRIBUTE) is not None:
            actions.add(self._interpret_event(element.get(EVENT_ATTRIBUTE)))
        machine.add_transition(
            Transition(state, self._interpret_state(target), conditions, self._counter.next_priority(), actions)
        )


def _local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def _text(element: etree._Element) -> str:
    return "".join(element.itertext()).strip()
