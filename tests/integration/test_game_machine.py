# tests/integration/test_game_machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import logging
from enum import Enum, auto

import pytest

from ndfsm import NO_ACTION, Priority, StateMachine
from ndfsm.builder import DslBuilder
from ndfsm.io import to_dot

logger = logging.getLogger(__name__)


class GameState(Enum):
    LOADER = auto()
    INTRO = auto()
    MENU = auto()
    CONFIGURATION = auto()
    GET_READY = auto()
    LEVEL = auto()
    LEVEL_FINISH = auto()
    GAME_OVER = auto()
    EXIT = auto()


class GameEvent(Enum):
    DONE = auto()
    START = auto()
    ESCAPE = auto()
    FIRE_A = auto()
    FIRE_B = auto()
    DEAD = auto()
    COMPLETE = auto()


S = GameState
E = GameEvent


@pytest.fixture
def game() -> StateMachine:
    builder = DslBuilder(Priority.NORMAL)
    builder.state(S.LOADER).on_exit(NO_ACTION).on_entry(NO_ACTION)
    builder.state(S.LOADER).is_a_start_state().when(E.DONE).action(NO_ACTION).then(S.INTRO)
    builder.state(S.INTRO).when(E.DONE).then(S.MENU)
    builder.state(S.MENU).when(E.START).then(S.GET_READY).when(E.ESCAPE).then(S.EXIT)
    builder.state(S.GET_READY).when(E.DONE).then(S.LEVEL)
    builder.state(S.LEVEL_FINISH).when(E.DONE).then(S.GET_READY)
    builder.state(S.LEVEL).when(E.DEAD).then(S.GAME_OVER).when(E.COMPLETE).then(S.LEVEL_FINISH)
    builder.state(S.GAME_OVER).when(E.DONE).then(S.MENU)
    builder.states(*GameState).except_(S.MENU, S.LOADER, S.EXIT).when(E.ESCAPE).then(S.MENU)
    builder.state(S.MENU).when(E.FIRE_A, E.FIRE_B).then(S.CONFIGURATION)
    builder.state(S.CONFIGURATION).when(E.FIRE_A, E.FIRE_B).then(S.MENU)
    builder.state(S.CONFIGURATION).when(E.FIRE_A).then(S.INTRO)
    builder.state(S.EXIT).is_an_end_state()
    machine = builder.build()
    logger.debug("\n%s", to_dot(machine))
    return machine


def test_start_state_is_loader(game: StateMachine, assert_active) -> None:
    assert_active(game, S.LOADER)


def test_loading_done(game: StateMachine, assert_active) -> None:
    game.handle_event(E.DONE)
    assert_active(game, S.INTRO)


def test_escape_from_menu_finishes(game: StateMachine, assert_active) -> None:
    game.handle_event(E.DONE)
    assert_active(game, S.INTRO)
    game.handle_event(E.DONE)
    assert_active(game, S.MENU)
    game.handle_event(E.ESCAPE)
    assert_active(game)
    assert game.is_finished()


def test_reset_returns_to_loader(game: StateMachine, assert_active) -> None:
    game.handle_event(E.DONE)
    game.reset()
    assert_active(game, S.LOADER)


def test_concurrent_states(game: StateMachine, assert_active) -> None:
    game.handle_event(E.DONE)
    game.handle_event(E.DONE)
    game.handle_event(E.FIRE_A)
    game.handle_event(E.FIRE_A)
    # both transitions out of CONFIGURATION matched FIRE_A
    assert_active(game, S.MENU, S.INTRO)
    game.handle_event(E.START)
    assert_active(game, S.GET_READY, S.INTRO)
    game.handle_event(E.DONE)
    assert_active(game, S.LEVEL, S.MENU)
    game.handle_event(E.START)
    assert_active(game, S.LEVEL, S.GET_READY)
    game.handle_event(E.DONE)
    assert_active(game, S.LEVEL)


def test_escape_from_any_game_state(game: StateMachine, assert_active) -> None:
    for event in (E.DONE, E.DONE, E.START, E.DONE, E.DEAD):
        game.handle_event(event)
    assert_active(game, S.GAME_OVER)
    game.handle_event(E.ESCAPE)
    assert_active(game, S.MENU)


def test_unknown_events_are_ignored(game: StateMachine, assert_active) -> None:
    game.handle_event("not a game event")
    game.handle_event(E.COMPLETE)
    assert_active(game, S.LOADER)
