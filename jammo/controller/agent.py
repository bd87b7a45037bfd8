"""
Agent: the robot's state record (current state, goal and interaction
handles, flags and inventory).
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from jammo.actions.action import Action
from jammo.world.inventory import Inventory
from .states import AgentState


@dataclass
class Agent:
    """
    The controlled robot's mutable state.

    ``goal_target``, ``current_interaction`` and ``carrying`` are registry
    handles. Only the AgentController mutates them.
    """
    name: str = "jammo"
    state: AgentState = AgentState.IDLE
    goal_target: Optional[int] = None
    current_interaction: Optional[int] = None
    carrying: Optional[int] = None
    is_game_over: bool = False
    is_hiding: bool = False
    inventory: Inventory = field(default_factory=Inventory)
    last_action: Optional[Action] = None

    def reset(self) -> None:
        self.state = AgentState.IDLE
        self.goal_target = None
        self.current_interaction = None
        self.carrying = None
        self.is_game_over = False
        self.is_hiding = False
        self.last_action = None
        self.inventory.clear()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "state": self.state.name.lower(),
            "goal_target": self.goal_target,
            "current_interaction": self.current_interaction,
            "carrying": self.carrying,
            "is_game_over": self.is_game_over,
            "is_hiding": self.is_hiding,
            "inventory": self.inventory.item_names(),
            "last_action": self.last_action.to_dict() if self.last_action else None,
        }
