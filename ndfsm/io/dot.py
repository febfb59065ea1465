# ndfsm/io/dot.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Hashable, Iterable, List

from ndfsm.core.state_machine import StateMachine, describe


def to_dot(machine: StateMachine) -> str:
    """
    Create a simple Graphviz "dot" diagram of a state machine. Start states are
    double circles, end states dotted circles. Entry and exit actions are not
    shown.

    :param machine: The machine to draw. It is only read.
    :return: The diagram source.
    """
    description = describe(machine)
    lines: List[str] = [
        "digraph finite_state_machine {",
        "\trankdir=LR;",
        '\tsize="8,5"',
    ]
    if description.start_states:
        lines.append("\tnode [shape = doublecircle, style=solid]; " + _names(description.start_states) + ";")
    if description.end_states:
        lines.append("\tnode [shape = circle, style=dotted]; " + _names(description.end_states) + ";")
    lines.append("\tnode [shape = circle, style=solid];")
    for source_state in _ordered(description.source_states):
        for transition in description.transitions[source_state]:
            label = str(transition.conditions).replace('"', '\\"')
            lines.append(f'\t{_quote(source_state)} -> {_quote(transition.destination)} [ label = "{label}" ];')
    lines.append("}")
    return "\n".join(lines) + "\n"


def _ordered(states: Iterable[Hashable]) -> List[Hashable]:
    return sorted(states, key=str)


def _names(states: Iterable[Hashable]) -> str:
    return " ".join(_quote(state) for state in _ordered(states))


def _quote(state: Hashable) -> str:
    name = str(state)
    if name.isidentifier():
        return name
    return '"' + name.replace('"', '\\"') + '"'
