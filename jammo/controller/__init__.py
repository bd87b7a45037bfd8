"""
Controller module - the robot's decision-making hub.

This module consolidates:
- AgentController: resolves ranked commands and runs the per-tick state machine
- Agent: the robot's mutable state (state, goal, interaction, inventory)
- AgentState / IntentKind: states and the closed verb parse

Usage:
    from jammo.controller import AgentController, AgentState

Flow:
    utterance -> ActionSpaceBuilder -> IntentRanker -> AgentController.resolve -> update() each tick
"""

from .agent_controller import AgentController, ControllerConfig, ResolveResult
from .agent import Agent
from .states import (
    AgentState,
    IntentKind,
    Transition,
    TARGETED_STATES,
    WALKING_STATES,
    parse_verb,
    state_for,
)

__all__ = [
    # Controller
    "AgentController",
    "ControllerConfig",
    "ResolveResult",
    "Agent",
    # States
    "AgentState",
    "IntentKind",
    "Transition",
    "TARGETED_STATES",
    "WALKING_STATES",
    "parse_verb",
    "state_for",
]
