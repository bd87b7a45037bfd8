"""
Runtime orchestrator for the voice-controlled robot.

Wires the world registry, mover, ranker and AgentController together and
drives them at a fixed tick rate. Speech recognition lives outside: whatever
produces text calls ``push_utterance`` and the next ``step`` resolves it.
"""
from dataclasses import dataclass
import logging
from typing import Any, Callable, Dict, List, Optional

from jammo.controller import AgentController, AgentState, ControllerConfig, ResolveResult
from jammo.intent import IntentRanker
from jammo.intent.ranker import Encoder
from jammo.world import (
    KinematicMover,
    Mover,
    Presenter,
    RecordingPresenter,
    WorldRegistry,
    build_demo_world,
)
from .events import Event, EventType, EventQueue

logger = logging.getLogger(__name__)


@dataclass
class RuntimeConfig:
    """Configuration for the runtime loop."""
    ticks_per_second: int = 30
    mover_speed: float = 2.0
    enable_logging: bool = True
    max_history: int = 1000


@dataclass
class StepResult:
    """Result of a single runtime step."""
    tick: int
    state: AgentState
    resolved: List[ResolveResult]
    events: List[Event]
    controller_state: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tick": self.tick,
            "state": self.state.name.lower(),
            "resolved": [r.to_dict() for r in self.resolved],
            "events": [e.to_dict() for e in self.events],
            "controller_state": self.controller_state,
        }


class Runtime:
    """
    Flow per tick:
    1. Process pending events (utterances, game over, restart)
    2. Advance the mover by one tick of time
    3. Run the controller's state handler
    4. Return step result

    Without a registry the demo scene is built and rebuilt on restart. An
    injected registry is only rebuilt on restart when ``world_factory`` is given.

    Usage:
        runtime = Runtime(encoder=SentenceEmbedder())
        runtime.push_utterance("go hide in the locker")

        while running:
            result = runtime.step()
    """

    def __init__(
        self,
        encoder: Encoder,
        config: Optional[RuntimeConfig] = None,
        registry: Optional[WorldRegistry] = None,
        mover: Optional[Mover] = None,
        presenter: Optional[Presenter] = None,
        controller_config: Optional[ControllerConfig] = None,
        world_factory: Optional[Callable[[WorldRegistry], Any]] = None,
    ):
        self.config = config or RuntimeConfig()

        if registry is None:
            registry = WorldRegistry()
            world_factory = world_factory or build_demo_world
            world_factory(registry)
        self._world_factory = world_factory
        self._registry = registry
        self._mover = mover or KinematicMover(speed=self.config.mover_speed)
        self._presenter = presenter or RecordingPresenter()
        self._controller = AgentController(
            registry=self._registry,
            mover=self._mover,
            ranker=IntentRanker(encoder),
            presenter=self._presenter,
            config=controller_config,
            on_restart=self._reload_world,
        )
        self._event_queue = EventQueue()

        self._tick = 0
        self._step_history: List[StepResult] = []
        self._tick_events: List[Event] = []

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def dt(self) -> float:
        return 1.0 / self.config.ticks_per_second

    @property
    def controller(self) -> AgentController:
        return self._controller

    @property
    def registry(self) -> WorldRegistry:
        return self._registry

    @property
    def mover(self) -> Mover:
        return self._mover

    @property
    def presenter(self) -> Presenter:
        return self._presenter

    @property
    def event_queue(self) -> EventQueue:
        return self._event_queue

    # =========================================================================
    # Input
    # =========================================================================

    def push_utterance(self, text: str) -> None:
        """Queue a transcribed command for the next tick."""
        self._event_queue.push_utterance(text, self._tick)

    def game_over(self, reason: Optional[str] = None) -> None:
        self._event_queue.push_game_over(self._tick, reason)

    def restart(self) -> None:
        self._event_queue.push_restart(self._tick)

    # =========================================================================
    # Loop
    # =========================================================================

    def step(self) -> StepResult:
        """Advance the simulation by one tick."""
        self._tick_events.clear()

        resolved = self._process_events()

        self._mover.step(self.dt)
        previous = self._controller.state
        state = self._controller.update()
        if state is not previous:
            self._emit_event(EventType.STATE_CHANGED, {
                "from": previous.name.lower(),
                "to": state.name.lower(),
            })

        result = StepResult(
            tick=self._tick,
            state=state,
            resolved=resolved,
            events=list(self._tick_events),
            controller_state=self._controller.get_state(),
        )
        if self.config.enable_logging:
            self._step_history.append(result)
            if len(self._step_history) > self.config.max_history:
                del self._step_history[0]

        self._tick += 1
        return result

    def run_until_idle(self, max_ticks: int = 1000) -> StepResult:
        """Step until the agent settles in IDLE or HIDING (or ``max_ticks`` pass)."""
        result = self.step()
        for _ in range(max_ticks - 1):
            if result.state in (AgentState.IDLE, AgentState.HIDING) and not self._event_queue.pending_count:
                break
            result = self.step()
        return result

    def _process_events(self) -> List[ResolveResult]:
        resolved = []
        for event in self._event_queue.pop_all():
            result = self._handle_event(event)
            if result is not None:
                resolved.append(result)
            self._event_queue.record_processed(event)
        return resolved

    def _handle_event(self, event: Event) -> Optional[ResolveResult]:
        if event.event_type == EventType.UTTERANCE:
            return self._handle_utterance(event)
        if event.event_type == EventType.GAME_OVER:
            self._controller.game_over()
        elif event.event_type == EventType.RESTART:
            self._controller.restart()
        return None

    def _handle_utterance(self, event: Event) -> ResolveResult:
        result = self._controller.on_utterance(event.data["text"])
        self._emit_event(EventType.INTENT_RESOLVED, result.to_dict())
        return result

    def _reload_world(self) -> None:
        """Restart hook: rebuild the scene from its factory, if there is one."""
        if self._world_factory is not None:
            logger.info("reloading world")
            self._registry.clear()
            self._world_factory(self._registry)
        if isinstance(self._mover, KinematicMover):
            self._mover.teleport(self._mover.start)

    def _emit_event(self, event_type: EventType, data: Dict[str, Any]) -> None:
        self._tick_events.append(Event(event_type=event_type, tick=self._tick, data=data))

    # =========================================================================
    # State
    # =========================================================================

    def get_state(self) -> Dict[str, Any]:
        return {
            "tick": self._tick,
            "controller": self._controller.get_state(),
            "world": self._registry.get_state(),
            "pending_events": self._event_queue.pending_count,
        }

    def get_step_history(self, last_n: Optional[int] = None) -> List[Dict[str, Any]]:
        history = self._step_history[-last_n:] if last_n else self._step_history
        return [r.to_dict() for r in history]
