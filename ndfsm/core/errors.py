# ndfsm/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details


class FsmError(Exception):
    """
    Base exception class for errors within the state machine library.
    """


class ValidationError(FsmError):
    """
    Raised when a transition, chain or condition is constructed from missing or
    invalid parts. Nothing partially built is ever returned.
    """


class ReentrancyError(FsmError):
    """
    Raised when reset, handle_event or poll is called on a machine that is
    already running one of them, for example from an action or a guard.
    """

    def __init__(self, operation: str) -> None:
        super().__init__(f"Cannot call {operation}() while the same state machine is evaluating")
        self.operation = operation


class ScxmlError(FsmError):
    """
    Raised when an SCXML document cannot be read.
    """
