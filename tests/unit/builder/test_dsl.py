# tests/unit/builder/test_dsl.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import logging
import threading

import pytest

from ndfsm.builder.dsl import DslBuilder, after, always, is_, log, never
from ndfsm.core.actions import LogAction
from ndfsm.core.conditions import (
    AfterCondition,
    AlwaysCondition,
    Conditions,
    MultiEventMatchCondition,
    NeverCondition,
    SingleEventMatchCondition,
)
from ndfsm.core.errors import ValidationError
from ndfsm.core.priority import Priority
from ndfsm.core.state_machine import StateMachine
from ndfsm.runtime.tasks import TaskAction, TaskFinishedCondition

# -----------------------------------------------------------------------------
# FIXTURES
# -----------------------------------------------------------------------------


@pytest.fixture
def builder() -> DslBuilder:
    return DslBuilder(Priority.NORMAL)


# -----------------------------------------------------------------------------
# FACTORIES
# -----------------------------------------------------------------------------


def test_condition_factories(clock) -> None:
    assert isinstance(always(), AlwaysCondition)
    assert isinstance(never(), NeverCondition)
    timer = after(20, clock)
    assert isinstance(timer, AfterCondition)
    assert timer.milliseconds == 20


def test_is_builds_single_or_multi_match() -> None:
    single = list(is_("go"))
    multi = list(is_("a", "b"))
    assert isinstance(single[0], SingleEventMatchCondition)
    assert isinstance(multi[0], MultiEventMatchCondition)
    with pytest.raises(ValidationError):
        is_()


def test_log_factory() -> None:
    action = log("entered")
    assert isinstance(action, LogAction)
    assert action.text == "entered"


# -----------------------------------------------------------------------------
# STATES
# -----------------------------------------------------------------------------


def test_start_and_end_states(builder: DslBuilder) -> None:
    builder.state("a").is_a_start_state()
    builder.states("y", "z").are_end_states()
    machine = builder.build()
    assert machine.get_start_states() == {"a"}
    assert machine.get_end_states() == {"y", "z"}
    assert machine.is_active("a")


def test_entry_and_exit_actions(builder: DslBuilder, trace, traced) -> None:
    builder.state("a").is_a_start_state().on_exit(traced("exit a")).when(always()).then("b")
    builder.state("b").on_entry(traced("enter b"))
    builder.build().poll()
    assert trace == ["exit a", "enter b"]


def test_except_removes_states(builder: DslBuilder) -> None:
    selection = builder.states("a", "b", "c").except_("b")
    assert selection.source_states == {"a", "c"}


def test_none_state_rejected(builder: DslBuilder) -> None:
    with pytest.raises(ValidationError):
        builder.state(None)
    with pytest.raises(ValidationError):
        builder.states("a", None)


def test_default_priority_required() -> None:
    with pytest.raises(ValidationError):
        DslBuilder(None)


def test_builder_fills_given_machine() -> None:
    machine = StateMachine()
    builder = DslBuilder(Priority.NORMAL, machine)
    builder.state("a").is_a_start_state()
    assert builder.build() is machine
    assert machine.is_active("a")


# -----------------------------------------------------------------------------
# TRANSITIONS
# -----------------------------------------------------------------------------


def test_when_with_events_matches_events(builder: DslBuilder) -> None:
    builder.state("a").is_a_start_state().when("go").then("b")
    builder.state("b").when("left", "right").then("c")
    machine = builder.build()
    machine.handle_event("go")
    assert machine.get_active_states() == {"b"}
    machine.handle_event("right")
    assert machine.get_active_states() == {"c"}


def test_chained_transitions_share_source(builder: DslBuilder) -> None:
    builder.state("menu").when("start").then("game").when("escape").then("exit")
    machine = builder.build()
    destinations = [t.destination for t in machine.get_transitions_for_source_state("menu")]
    assert destinations == ["game", "exit"]


def test_when_without_arguments_is_always(builder: DslBuilder) -> None:
    builder.state("a").when().then("b")
    (transition,) = builder.build().get_transitions_for_source_state("a")
    assert transition.conditions.is_met()


def test_when_rejects_mixed_arguments(builder: DslBuilder) -> None:
    with pytest.raises(ValidationError):
        builder.state("a").when(always(), "go")
    with pytest.raises(ValidationError):
        builder.state("a").when(None)


def test_transition_uses_default_or_given_priority(builder: DslBuilder) -> None:
    builder.state("a").when(always()).then("b")
    builder.state("a").when(always()).with_prio(Priority.HIGH).then("c")
    transitions = builder.build().get_transitions_for_source_state("a")
    assert [(t.destination, t.priority) for t in transitions] == [("c", Priority.HIGH), ("b", Priority.NORMAL)]


def test_transition_actions(builder: DslBuilder, trace, traced) -> None:
    builder.state("a").is_a_start_state().when(always()).action(traced("1")).action(traced("2")).then("b")
    builder.build().poll()
    assert trace == ["1", "2"]


def test_explicit_transition_replaces_condition(builder: DslBuilder, trace, traced) -> None:
    builder.state("a").is_a_start_state()
    builder.state("a").when(always()).transition("b", never(), Priority.HIGH, traced("H"))
    machine = builder.build()
    (transition,) = machine.get_transitions_for_source_state("a")
    assert str(transition.conditions) == "never"
    machine.poll()
    assert trace == []


def test_multiple_sources_get_their_own_transitions(builder: DslBuilder, trace, traced) -> None:
    builder.states("a", "b").when("escape").action(traced("esc")).then("menu")
    machine = builder.build()
    (from_a,) = machine.get_transitions_for_source_state("a")
    (from_b,) = machine.get_transitions_for_source_state("b")
    assert from_a is not from_b
    assert from_a.actions is not from_b.actions
    assert list(from_a.conditions)[0] is not list(from_b.conditions)[0]


def test_active_and_inactive_conditions(builder: DslBuilder) -> None:
    builder.states("a", "b").are_start_states()
    builder.state("a").when(builder.active("b")).then("a2")
    builder.state("b").when(builder.inactive("a")).then("b2")
    machine = builder.build()
    machine.poll()
    # a leaves first; b sees a inactive only in the next round
    assert machine.get_active_states() == {"a2", "b2"}


def test_none_arguments_rejected(builder: DslBuilder) -> None:
    transition = builder.state("a").when(always())
    with pytest.raises(ValidationError):
        transition.action(None)
    with pytest.raises(ValidationError):
        transition.with_prio(None)
    with pytest.raises(ValidationError):
        transition.then(None)
    with pytest.raises(ValidationError):
        transition.transition("b", None, Priority.NORMAL)


def test_build_logs(builder: DslBuilder, caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="ndfsm.builder.dsl"):
        builder.build()
    assert "Built machine" in caplog.text


# -----------------------------------------------------------------------------
# TASKS
# -----------------------------------------------------------------------------


def test_when_with_task_uses_its_finished_condition(builder: DslBuilder) -> None:
    task = TaskAction(lambda: None, name="load")
    builder.state("A").when(task).then("B")
    (transition,) = builder.build().get_transitions_for_source_state("A")
    (condition,) = list(transition.conditions)
    assert isinstance(condition, TaskFinishedCondition)
    assert condition is task.finished


def test_when_rejects_task_mixed_with_event(builder: DslBuilder) -> None:
    task = TaskAction(lambda: None)
    with pytest.raises(ValidationError):
        builder.state("A").when(task, "go")


@pytest.mark.slow
def test_transition_waits_for_task_started_by_earlier_transition(builder: DslBuilder, assert_active) -> None:
    release = threading.Event()
    task = TaskAction(release.wait, name="load")
    builder.state("A").is_a_start_state().when(always()).action(task).then("B")
    builder.state("B").when(task).then("C")
    machine = builder.build()

    machine.poll()
    assert_active(machine, "B")
    release.set()
    assert task.join(timeout=5)
    machine.poll()
    assert_active(machine, "C")
