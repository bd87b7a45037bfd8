"""
ActionSpaceBuilder assembles the commands that are valid right now.

Order matters (the ranker returns an index into the built space, and ties go
to the lowest index):
    1. the active interaction's own commands
    2. the bonus commands (always available)
    3. everything the current room offers
Once the game is over the space is just ["restart"].
"""
from typing import Iterable, Optional, TYPE_CHECKING

from .action import Action, ActionSpace, DEFAULT_BONUS_ACTIONS, restart_space

if TYPE_CHECKING:
    from jammo.controller.agent import Agent
    from jammo.world.registry import WorldRegistry


class ActionSpaceBuilder:
    """
    Usage:
        builder = ActionSpaceBuilder(registry)
        space = builder.build(agent)
        index, score = ranker.rank_space(utterance, space)
    """

    def __init__(
        self,
        registry: "WorldRegistry",
        bonus_actions: Optional[Iterable[Action]] = None,
    ):
        self._registry = registry
        self._bonus = tuple(DEFAULT_BONUS_ACTIONS if bonus_actions is None else bonus_actions)

    @property
    def bonus_actions(self) -> ActionSpace:
        return ActionSpace(self._bonus)

    def build(self, agent: "Agent") -> ActionSpace:
        if agent.is_game_over:
            return restart_space()

        interaction_actions = []
        interaction = self._registry.get(agent.current_interaction)
        if interaction is not None:
            interaction_actions = interaction.get_current_actions()

        return ActionSpace.concat(
            interaction_actions,
            self._bonus,
            self._registry.current_room_actions(),
        )

    def room_space(self) -> ActionSpace:
        """The space without any interaction-specific commands."""
        return ActionSpace.concat(self._bonus, self._registry.current_room_actions())
