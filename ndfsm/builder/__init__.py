"""
Builders that fill a state machine through its construction methods.
"""

from .dsl import DefiningState, DefiningTransition, DslBuilder, after, always, is_, log, never
from .scxml import ScxmlBuilder

__all__ = [
    "DefiningState",
    "DefiningTransition",
    "DslBuilder",
    "ScxmlBuilder",
    "after",
    "always",
    "is_",
    "log",
    "never",
]
