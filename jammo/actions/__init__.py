"""
Action catalog and action space construction.

Usage:
    from jammo.actions import Action, ActionSpace, ActionSpaceBuilder
"""
from .action import (
    Action,
    ActionSpace,
    DEFAULT_BONUS_ACTIONS,
    DISENGAGE_VERBS,
    HIDE_VERB,
    RESTART_VERB,
    disengage_actions,
    normalize_name,
    restart_space,
)
from .builder import ActionSpaceBuilder

__all__ = [
    "Action",
    "ActionSpace",
    "ActionSpaceBuilder",
    "DEFAULT_BONUS_ACTIONS",
    "DISENGAGE_VERBS",
    "HIDE_VERB",
    "RESTART_VERB",
    "disengage_actions",
    "normalize_name",
    "restart_space",
]
