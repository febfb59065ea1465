"""
Runtime helpers: time sources for timer conditions (timers) and actions that
run work on worker threads (tasks).
"""

from .timers import ManualTimeSource, MonotonicTimeSource, TimeSource
from .tasks import FinishableAction, TaskAction, TaskFinishedCondition

__all__ = [
    "FinishableAction",
    "ManualTimeSource",
    "MonotonicTimeSource",
    "TaskAction",
    "TaskFinishedCondition",
    "TimeSource",
]
