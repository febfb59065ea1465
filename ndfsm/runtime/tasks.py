# ndfsm/runtime/tasks.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol, runtime_checkable

from ndfsm.core.errors import ValidationError

if TYPE_CHECKING:
    from ndfsm.core.conditions import Condition

logger = logging.getLogger(__name__)


@runtime_checkable
class FinishableAction(Protocol):
    """
    An action which finishes at some time after it was executed. A transition
    can wait for it by using its finished condition.
    """

    def __call__(self) -> None: ...

    @property
    def finished(self) -> Condition: ...


class TaskFinishedCondition:
    """
    Met when the task's most recent worker thread has run to completion. Not
    met before the task has been executed at all.
    """

    def __init__(self, task: "TaskAction") -> None:
        self._task = task

    def handle_event(self, event: Any) -> None:
        pass

    def is_met(self) -> bool:
        return self._task.is_done()

    def reset(self) -> None:
        pass

    def __str__(self) -> str:
        return f"{self._task} finished"


class TaskAction:
    """
    Runs user code on a separate worker thread each time the action executes.

    The worker must not touch the state machine. Its completion reaches the
    machine only through the finished condition, which is evaluated by the
    thread that calls poll() or handle_event().
    """

    def __init__(self, work: Callable[[], None], name: Optional[str] = None) -> None:
        """
        :param work: The code to run on the worker thread.
        :param name: Optional name for the worker thread and for display.
        """
        if work is None or not callable(work):
            raise ValidationError("Task work must be callable")
        self._work = work
        self._name = name or getattr(work, "__name__", "task")
        self._thread: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None
        self._finished = TaskFinishedCondition(self)

    @property
    def finished(self) -> TaskFinishedCondition:
        return self._finished

    @property
    def error(self) -> Optional[BaseException]:
        """The exception raised by the most recent run, if any."""
        return self._error

    def __call__(self) -> None:
        self._error = None
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        logger.debug("start task %s", self._name)
        self._thread.start()

    def _run(self) -> None:
        try:
            self._work()
        except Exception as error:
            # The worker has no caller to raise to; keep it for the owner.
            logger.exception("task %s failed", self._name)
            self._error = error

    def is_done(self) -> bool:
        return self._thread is not None and not self._thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the current worker thread.

        :param timeout: Seconds to wait, or None to wait indefinitely.
        :return: True if the worker has finished.
        """
        if self._thread is None:
            return False
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def __str__(self) -> str:
        return f"task {self._name}"
