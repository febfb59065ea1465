"""
Core package: the evaluation engine and its building blocks.

Architecture:
- actions: chains of zero-argument callbacks
- conditions: stateful guards and their conjunction
- transitions: immutable prioritized edges
- state_machine: active states, transition table and the polling algorithm
"""

# Import order matters to avoid circular dependencies
from .errors import FsmError, ReentrancyError, ScxmlError, ValidationError
from .priority import Priority, PriorityCounter
from .actions import NO_ACTION, Action, Actions, LogAction, NoAction
from .conditions import (
    AfterCondition,
    AlwaysCondition,
    Condition,
    Conditions,
    MultiEventMatchCondition,
    NeverCondition,
    SingleEventMatchCondition,
    StatesActiveCondition,
    StatesInactiveCondition,
    SubStateMachineCondition,
)
from .transitions import Transition
from .state_machine import MachineDescription, StateMachine, describe

__all__ = [
    # Errors
    "FsmError",
    "ReentrancyError",
    "ScxmlError",
    "ValidationError",
    # Priorities
    "Priority",
    "PriorityCounter",
    # Actions
    "NO_ACTION",
    "Action",
    "Actions",
    "LogAction",
    "NoAction",
    # Conditions
    "AfterCondition",
    "AlwaysCondition",
    "Condition",
    "Conditions",
    "MultiEventMatchCondition",
    "NeverCondition",
    "SingleEventMatchCondition",
    "StatesActiveCondition",
    "StatesInactiveCondition",
    "SubStateMachineCondition",
    # Engine
    "Transition",
    "MachineDescription",
    "StateMachine",
    "describe",
]
