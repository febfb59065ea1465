# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Callable, List
from unittest.mock import MagicMock

import pytest

from ndfsm.core.state_machine import StateMachine
from ndfsm.runtime.timers import ManualTimeSource


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "slow: mark test as using real time or threads")


@pytest.fixture
def machine() -> StateMachine:
    """An empty state machine."""
    return StateMachine()


@pytest.fixture
def trace() -> List[str]:
    """A list that trace actions append their signature to."""
    return []


@pytest.fixture
def traced(trace: List[str]) -> Callable[[str], Callable[[], None]]:
    """Returns a factory for actions that record a signature in trace."""

    def _factory(signature: str) -> Callable[[], None]:
        def _action() -> None:
            trace.append(signature)

        _action.__name__ = f"trace_{signature}"
        return _action

    return _factory


@pytest.fixture
def clock() -> ManualTimeSource:
    """A manually driven clock for timer conditions."""
    return ManualTimeSource()


@pytest.fixture
def hook() -> MagicMock:
    """A hook object recording every lifecycle notification."""
    h = MagicMock()
    h.on_enter = MagicMock()
    h.on_exit = MagicMock()
    h.on_transition = MagicMock()
    h.on_error = MagicMock()
    return h


@pytest.fixture
def assert_active() -> Callable[..., None]:
    """Returns a checker asserting that exactly the given states are active."""

    def _check(machine: StateMachine, *expected) -> None:
        for state in expected:
            assert machine.is_active(state), f"Expected {state} to be active."
        for state in machine.get_active_states():
            assert state in expected, f"{state} was active, but not expected."

    return _check
