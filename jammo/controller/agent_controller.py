"""
AgentController - the robot's state machine.

Two entry points:
1. resolve(score, index, action_space): interpret the ranker's best match,
   pick the new state and its goal target (event driven, once per command)
2. update(): advance the current state by one tick (navigation polling,
   arrival handling, world callbacks)

Every failure the user can cause (low-confidence match, a target that is not
there, an index outside the action space) ends in PUZZLED, which plays its
cue and returns to IDLE on the next tick. Nothing here raises for them.

A new command simply overwrites state and goal, abandoning whatever the
robot was doing. There is no timeout: the robot keeps walking toward an
unreachable goal until told otherwise.
"""
from dataclasses import dataclass, field
import logging
from typing import Any, Callable, Dict, Optional

from jammo.actions.action import Action, ActionSpace, restart_space
from jammo.actions.builder import ActionSpaceBuilder
from jammo.intent.ranker import IntentRanker
from jammo.world.entities import PickUp, RoomSwitcher, Vec3, WorldObject
from jammo.world.interactables import HidingSpot, Interactable
from jammo.world.mover import Mover
from jammo.world.presenter import Cue, Presenter, RecordingPresenter
from jammo.world.registry import WorldRegistry
from .agent import Agent
from .states import (
    AgentState,
    IntentKind,
    TARGETED_STATES,
    Transition,
    WALKING_STATES,
    parse_verb,
    state_for,
)

logger = logging.getLogger(__name__)


@dataclass
class ControllerConfig:
    acceptance_threshold: float = 0.15
    arrival_speed: float = 0.3                 # mover must be slower than this to "arrive"
    reached_position_distance: float = 0.5     # planar
    reached_object_position_distance: float = 1.0  # grab / drop reach
    vertical_tolerance: float = 3.0
    audience_marker: str = "audiencepos"
    drop_point: Vec3 = field(default_factory=lambda: Vec3(0.0, 0.0, -3.0))


@dataclass
class ResolveResult:
    """What a single utterance resolved to (for logging and events)."""
    utterance: str
    index: int
    score: float
    action: Optional[Action]
    state: AgentState
    accepted: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "utterance": self.utterance,
            "index": self.index,
            "score": round(self.score, 4),
            "action": self.action.to_dict() if self.action else None,
            "state": self.state.name.lower(),
            "accepted": self.accepted,
        }


class AgentController:
    """
    Usage:
        controller = AgentController(registry, mover, ranker=IntentRanker(embedder))

        # a transcribed utterance arrives
        result = controller.on_utterance("go to the locker")

        # every frame
        controller.update()
    """

    def __init__(
        self,
        registry: WorldRegistry,
        mover: Mover,
        ranker: Optional[IntentRanker] = None,
        presenter: Optional[Presenter] = None,
        builder: Optional[ActionSpaceBuilder] = None,
        config: Optional[ControllerConfig] = None,
        agent: Optional[Agent] = None,
        on_restart: Optional[Callable[[], None]] = None,
    ):
        self.registry = registry
        self.mover = mover
        self.ranker = ranker
        self.presenter = presenter or RecordingPresenter()
        self.builder = builder or ActionSpaceBuilder(registry)
        self.config = config or ControllerConfig()
        self.agent = agent or Agent()
        self._on_restart = on_restart

        if self.agent.inventory.on_consumed is None:
            self.agent.inventory.on_consumed = registry.remove

        # Working action space: last built space, or the fragment of a
        # freshly started interaction.
        self.action_space: ActionSpace = self.builder.build(self.agent)

        self._handlers: Dict[AgentState, Callable[[], Optional[Transition]]] = {
            AgentState.IDLE: self._tick_idle,
            AgentState.SIT: lambda: self._flash(Cue.SIT),
            AgentState.HELLO: lambda: self._flash(Cue.HELLO),
            AgentState.DANCE: lambda: self._flash(Cue.DANCE),
            AgentState.PUZZLED: lambda: self._flash(Cue.PUZZLED),
            AgentState.GO_HIDE: self._tick_move_to,
            AgentState.HIDING: self._tick_hiding,
            AgentState.MOVE_TO: self._tick_move_to,
            AgentState.USE_INTERACT: self._tick_use_interact,
            AgentState.PICK_UP: self._tick_pick_up,
            AgentState.BRING_OBJECT: self._tick_bring_object,
            AgentState.BRING_OBJECT_TO_PLAYER: self._tick_bring_object_to_player,
        }

    # =========================================================================
    # Commands
    # =========================================================================

    def build_action_space(self) -> ActionSpace:
        self.action_space = self.builder.build(self.agent)
        return self.action_space

    def on_utterance(self, text: str) -> ResolveResult:
        """Rebuild the action space, rank the utterance against it, resolve."""
        if self.ranker is None:
            raise RuntimeError("AgentController.on_utterance needs a ranker")

        space = self.build_action_space()
        index, score = self.ranker.rank_space(text, space)
        accepted = score >= self.config.acceptance_threshold
        action = space[index] if space.contains_index(index) else None
        logger.info(
            "%r -> %r (score %.3f)", text, action.sentence if action else None, score,
        )
        state = self.resolve(score, index, space)
        return ResolveResult(text, index, score, action, state, accepted)

    def resolve(self, score: float, index: int, action_space: Optional[ActionSpace] = None) -> AgentState:
        """
        Apply the ranker's best match.

        Args:
            score: similarity of the best candidate
            index: position of the best candidate in ``action_space``
            action_space: the space that was ranked (defaults to the working space)

        Returns:
            The agent's state after resolution
        """
        space = self.action_space if action_space is None else action_space

        if score < self.config.acceptance_threshold:
            logger.info("low confidence (%.3f < %.3f)", score, self.config.acceptance_threshold)
            return self._become_puzzled()

        if not space.contains_index(index):
            logger.warning("ranked index %d outside action space of %d", index, len(space))
            return self._become_puzzled()

        action = space[index]
        kind = parse_verb(action.verb)

        if self.agent.is_game_over:
            if kind is IntentKind.RESTART:
                self.restart()
            else:
                logger.info("game over, ignoring %r", action.sentence)
            return self.agent.state

        if self.agent.is_hiding or self.agent.state is AgentState.HIDING:
            self._leave_hiding_spot()

        interaction = self._current_interaction()
        if interaction is not None and kind is IntentKind.DISENGAGE:
            self._end_interaction(interaction)
        elif interaction is not None:
            interaction.perform_interaction(action, self.agent.inventory)

        new_state = state_for(kind)
        if new_state is None:
            # Interaction verbs, disengage, stray restart: nothing to travel to.
            logger.debug("verb %r keeps state %s", action.verb, self.agent.state.name)
            self.agent.last_action = action
            return self.agent.state

        self.agent.state = new_state
        target = self._resolve_target(new_state, action)
        self.agent.goal_target = target.handle if target is not None else None

        if new_state in TARGETED_STATES and target is None:
            logger.info("no target for %r (%s)", action.sentence, new_state.name)
            return self._become_puzzled()

        self.agent.last_action = action
        logger.info(
            "state -> %s%s", new_state.name, f" (target {target.name})" if target is not None else "",
        )
        return self.agent.state

    def _resolve_target(self, state: AgentState, action: Action) -> Optional[WorldObject]:
        noun = action.noun
        registry = self.registry

        if state is AgentState.PICK_UP:
            target = registry.find_pickup(noun)
            if target is None and registry.find_object(noun) is not None:
                # Named thing exists but cannot be picked up.
                return None
            return target or registry.closest_pickup(self.mover.position())

        if state is AgentState.USE_INTERACT:
            return registry.find_interactable(noun)

        if state is AgentState.MOVE_TO:
            return (
                registry.find_interactable(noun)
                or registry.find_room_switcher(noun)
                or registry.find_object(noun)
            )

        if state is AgentState.GO_HIDE:
            if noun:
                return registry.find_hiding_spot(noun)
            return registry.closest_hiding_spot(self.mover.position())

        if state in (AgentState.BRING_OBJECT, AgentState.BRING_OBJECT_TO_PLAYER):
            return registry.find_object(noun)

        return None

    def _become_puzzled(self) -> AgentState:
        self.agent.state = AgentState.PUZZLED
        self.agent.goal_target = None
        return self.agent.state

    # =========================================================================
    # Tick
    # =========================================================================

    def update(self) -> AgentState:
        """Run the current state's handler once. Returns the resulting state."""
        handler = self._handlers[self.agent.state]
        transition = handler()
        if transition is not None:
            self._apply(transition)

        self._follow_carried_object()
        self.presenter.set_walk_speed(1.0 if self.agent.state in WALKING_STATES else 0.0)
        return self.agent.state

    def _apply(self, transition: Transition) -> None:
        if transition.state is not self.agent.state:
            logger.debug("%s -> %s", self.agent.state.name, transition.state.name)
        self.agent.state = transition.state
        self.agent.goal_target = transition.target

    def _tick_idle(self) -> Optional[Transition]:
        return None

    def _flash(self, cue: Cue) -> Transition:
        """One-shot presentational state: stop, face the viewer, play, back to idle."""
        self.mover.stop()
        self.presenter.face_viewer()
        self.presenter.trigger(cue)
        return Transition(AgentState.IDLE)

    def _tick_move_to(self) -> Optional[Transition]:
        target = self._goal()
        if target is None:
            return self._lost_target()

        self._move_toward(target)
        if not self._has_arrived(target):
            return None

        self.mover.stop()
        if isinstance(target, HidingSpot):
            self._engage(target)
            return Transition(AgentState.HIDING)
        if target.matches(self.config.audience_marker):
            return Transition(AgentState.HELLO)
        if isinstance(target, RoomSwitcher):
            self._enter_room(target)
        return Transition(AgentState.IDLE)

    def _tick_hiding(self) -> Optional[Transition]:
        if not self.agent.is_hiding:
            self.agent.is_hiding = True
            self.presenter.set_body_visible(False)
        return None

    def _tick_use_interact(self) -> Optional[Transition]:
        target = self._goal()
        if target is None:
            return self._lost_target()

        self._move_toward(target)
        if not self._has_arrived(target):
            return None

        self.mover.stop()
        if isinstance(target, HidingSpot):
            self._engage(target)
            return Transition(AgentState.HIDING)

        next_state = AgentState.HELLO if target.matches(self.config.audience_marker) else AgentState.IDLE
        if isinstance(target, Interactable):
            self._engage(target)
        return Transition(next_state)

    def _tick_pick_up(self) -> Optional[Transition]:
        target = self._goal()
        if target is None:
            return self._lost_target()

        self._move_toward(target)
        if not self._has_arrived(target):
            return None

        self.mover.stop()
        if isinstance(target, PickUp) and not target.held:
            self.agent.inventory.add_item(target)
            return Transition(AgentState.IDLE)
        logger.info("%s cannot be picked up", target.name)
        return Transition(AgentState.PUZZLED)

    def _tick_bring_object(self) -> Optional[Transition]:
        target = self._goal()
        if target is None:
            return self._lost_target()

        self._move_toward(target)
        position = self.mover.position()
        if position.distance_to(target.position) < self.config.reached_object_position_distance:
            target.attach(self.agent.name, position)
            self.agent.carrying = target.handle
            logger.info("grabbed %s", target.name)
            return Transition(AgentState.BRING_OBJECT_TO_PLAYER, target.handle)
        return None

    def _tick_bring_object_to_player(self) -> Optional[Transition]:
        target = self._goal()
        if target is None:
            return self._lost_target()

        position = self.mover.position()
        drop = self.config.drop_point.at_height(position.y)
        self.mover.set_destination(drop)
        if position.distance_to(drop) < self.config.reached_object_position_distance:
            self.mover.stop()
            target.detach()
            self.agent.carrying = None
            logger.info("dropped %s", target.name)
            return Transition(AgentState.IDLE)
        return None

    # =========================================================================
    # Helpers
    # =========================================================================

    def _goal(self) -> Optional[WorldObject]:
        return self.registry.get(self.agent.goal_target)

    def _current_interaction(self) -> Optional[Interactable]:
        interaction = self.registry.get(self.agent.current_interaction)
        if interaction is None and self.agent.current_interaction is not None:
            # Destroyed while engaged.
            self.agent.current_interaction = None
        return interaction

    def _lost_target(self) -> Transition:
        logger.warning("goal target %s no longer exists", self.agent.goal_target)
        self.mover.stop()
        return Transition(AgentState.PUZZLED)

    def _move_toward(self, target: WorldObject) -> None:
        self.mover.set_destination(target.position.at_height(self.mover.position().y))

    def _has_arrived(self, target: WorldObject) -> bool:
        position = self.mover.position()
        return (
            self.mover.velocity_magnitude() < self.config.arrival_speed
            and position.vertical_offset_to(target.position) < self.config.vertical_tolerance
            and position.planar_distance_to(target.position) < self.config.reached_position_distance
        )

    def _engage(self, interactable: Interactable) -> None:
        """Make ``interactable`` the current interaction and adopt its commands."""
        previous = self._current_interaction()
        if previous is not None and previous is not interactable:
            previous.end_interaction()

        fragment = interactable.start_interaction(self.agent.last_action, self.agent.inventory)
        if fragment:
            self.agent.current_interaction = interactable.handle
            self.action_space = ActionSpace(fragment)
        else:
            # One-shot: the interaction already ended inside start_interaction.
            self.agent.current_interaction = None
            self.action_space = self.builder.room_space()

    def _end_interaction(self, interaction: Interactable) -> None:
        interaction.end_interaction()
        self.agent.current_interaction = None
        self.action_space = self.builder.room_space()

    def _leave_hiding_spot(self) -> None:
        self.agent.is_hiding = False
        self.presenter.set_body_visible(True)
        interaction = self._current_interaction()
        if interaction is not None:
            self._end_interaction(interaction)
        self.presenter.reset_rig()
        self.agent.state = AgentState.IDLE
        self.agent.goal_target = None

    def _enter_room(self, switcher: RoomSwitcher) -> None:
        if switcher.target_room:
            self.registry.set_current_room(switcher.target_room)
            self.action_space = self.builder.room_space()

    def _follow_carried_object(self) -> None:
        carried = self.registry.get(self.agent.carrying)
        if carried is not None and carried.is_carried:
            carried.position = self.mover.position()

    # =========================================================================
    # Game over
    # =========================================================================

    def game_over(self) -> None:
        """Only "restart" is accepted from here on."""
        logger.info("game over")
        self.agent.is_game_over = True
        self.agent.state = AgentState.IDLE
        self.agent.goal_target = None
        self.mover.stop()
        self.presenter.trigger(Cue.DYING)
        self.action_space = restart_space()

    def restart(self) -> None:
        logger.info("restart")
        interaction = self._current_interaction()
        if interaction is not None:
            interaction.end_interaction()
        if self._on_restart is not None:
            self._on_restart()
        self.agent.reset()
        self.mover.stop()
        self.presenter.set_body_visible(True)
        self.presenter.reset_rig()
        self.action_space = self.builder.build(self.agent)

    # =========================================================================
    # State Queries
    # =========================================================================

    @property
    def state(self) -> AgentState:
        return self.agent.state

    @property
    def goal_target(self) -> Optional[WorldObject]:
        return self._goal()

    @property
    def current_interaction(self) -> Optional[Interactable]:
        return self.registry.get(self.agent.current_interaction)

    def get_state(self) -> Dict[str, Any]:
        """Controller state for debugging/logging."""
        goal = self._goal()
        return {
            "agent": self.agent.to_dict(),
            "goal_target_name": goal.name if goal is not None else None,
            "position": self.mover.position().to_dict(),
            "current_room": self.registry.current_room,
            "action_space_size": len(self.action_space),
        }
