"""ndfsm: a non-deterministic finite state machine with multiple active states

Responsibilities:
    - Tracking any number of concurrently active states
    - Evaluating prioritized, guarded transitions against events and time
    - Running entry, exit and transition actions in a fixed order
    - Building machines fluently or from SCXML, and drawing them as dot graphs

Cross-cutting Concerns:
    Thread Safety:
        - A machine is driven by one caller; it holds no locks
        - Reentrant calls into a machine that is evaluating are rejected

    Error Handling:
        - Errors derive from ndfsm.core.errors.FsmError
        - Action failures propagate unchanged to the caller

    Logging:
        - Standard library logging, one logger per module
        - The library never configures handlers
"""

from ndfsm.core import (
    NO_ACTION,
    Action,
    Actions,
    AfterCondition,
    AlwaysCondition,
    Condition,
    Conditions,
    FsmError,
    LogAction,
    MachineDescription,
    MultiEventMatchCondition,
    NeverCondition,
    NoAction,
    Priority,
    PriorityCounter,
    ReentrancyError,
    ScxmlError,
    SingleEventMatchCondition,
    StateMachine,
    StatesActiveCondition,
    StatesInactiveCondition,
    SubStateMachineCondition,
    Transition,
    ValidationError,
    describe,
)

__version__ = "0.1.0"

__all__ = [
    "NO_ACTION",
    "Action",
    "Actions",
    "AfterCondition",
    "AlwaysCondition",
    "Condition",
    "Conditions",
    "FsmError",
    "LogAction",
    "MachineDescription",
    "MultiEventMatchCondition",
    "NeverCondition",
    "NoAction",
    "Priority",
    "PriorityCounter",
    "ReentrancyError",
    "ScxmlError",
    "SingleEventMatchCondition",
    "StateMachine",
    "StatesActiveCondition",
    "StatesInactiveCondition",
    "SubStateMachineCondition",
    "Transition",
    "ValidationError",
    "describe",
]
