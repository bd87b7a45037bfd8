"""
Interactable world objects.

An Interactable can be walked to and engaged. While engaged it contributes
its own commands to the action space ("press the button", "back", ...) and
receives every command the user gives until a disengage verb ends the
interaction.
"""
from dataclasses import dataclass, field
import logging
from typing import Callable, List, Optional, TYPE_CHECKING

from jammo.actions.action import Action, disengage_actions
from .entities import WorldObject

if TYPE_CHECKING:
    from .inventory import Inventory

logger = logging.getLogger(__name__)


@dataclass
class ActionEventPair:
    """
    Fires ``callback`` when the performed action's sentence or verb equals
    ``action`` (case-insensitive). Optionally gated on an inventory item.
    """
    action: str
    callback: Callable[[], None]
    required_item: str = ""
    consumes_item: bool = False

    def matches(self, action: Action) -> bool:
        key = self.action.lower()
        return key == action.sentence.lower() or key == action.verb.lower()


@dataclass(eq=False)
class Interactable(WorldObject):
    use_synonyms: List[str] = field(default_factory=list)
    possible_interactions: List[Action] = field(default_factory=list)
    action_event_pairs: List[ActionEventPair] = field(default_factory=list)

    engaged: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        if not self.possible_interactions:
            self.possible_interactions = self._default_interactions()
        if self.possible_interactions:
            self._append_disengage_actions()

    def _default_interactions(self) -> List[Action]:
        return []

    def _append_disengage_actions(self) -> None:
        known = {action.sentence for action in self.possible_interactions}
        for action in disengage_actions():
            if action.sentence not in known:
                self.possible_interactions.append(action)

    # =========================================================================
    # Action catalog
    # =========================================================================

    def get_possible_actions(self) -> List[Action]:
        """Room-level commands that target this object."""
        actions = []
        for name in self.all_names():
            actions.append(Action("Move to the " + name, "MoveTo", self.name))
            actions.append(Action("Go to the " + name, "MoveTo", self.name))
            actions.append(Action("Use the " + name, "UseInteract", self.name))
            actions.append(Action("Interact with the " + name, "UseInteract", self.name))
            for verb in self.use_synonyms:
                actions.append(Action(verb + " " + name, "UseInteract", self.name))
        return actions

    def get_current_actions(self) -> List[Action]:
        """Commands offered while this object is being interacted with."""
        return list(self.possible_interactions)

    # =========================================================================
    # Interaction lifecycle
    # =========================================================================

    def start_interaction(
        self,
        last_action: Optional[Action],
        inventory: Optional["Inventory"] = None,
    ) -> List[Action]:
        """
        Engage this object. Returns the action fragment for the interaction;
        an empty list means the interaction was one-shot and already ended.
        """
        logger.debug("start interaction with %s", self.name)
        self.engaged = True
        if self.action_event_pairs and last_action is not None:
            self.perform_interaction(last_action, inventory)
        if not self.possible_interactions:
            self.end_interaction()
        return list(self.possible_interactions)

    def perform_interaction(self, action: Action, inventory: Optional["Inventory"]) -> bool:
        """Run every event bound to ``action``. Returns True if any fired."""
        fired = False
        for pair in self.action_event_pairs:
            if not pair.matches(action):
                continue
            if pair.required_item and (inventory is None or not inventory.has_item(pair.required_item)):
                logger.info("%s: '%s' needs %s", self.name, pair.action, pair.required_item)
                continue
            pair.callback()
            fired = True
            if pair.required_item and pair.consumes_item:
                inventory.consume_item(pair.required_item)
        return fired

    def end_interaction(self) -> None:
        logger.debug("end interaction with %s", self.name)
        self.engaged = False


@dataclass(eq=False)
class HidingSpot(Interactable):
    """A place the robot can hide in. Hiding hides the robot's body."""

    def __post_init__(self) -> None:
        if "Hide" not in self.use_synonyms:
            self.use_synonyms.append("Hide")
        super().__post_init__()
        self._append_disengage_actions()

    def start_interaction(
        self,
        last_action: Optional[Action],
        inventory: Optional["Inventory"] = None,
    ) -> List[Action]:
        self.engaged = True
        return list(self.possible_interactions)


@dataclass(eq=False)
class Button(Interactable):
    """Push button. Pressing it resets the linked opposite button."""
    other_button: Optional["Button"] = None
    locked: bool = False
    is_pressed: bool = field(default=False, init=False)

    def _default_interactions(self) -> List[Action]:
        return [
            Action("press the button", "PressButton"),
            Action("press", "PressButton"),
            Action("push the button", "PressButton"),
        ]

    def press(self) -> bool:
        if self.locked:
            logger.info("%s is locked and cannot be pressed", self.name)
            return False
        if self.other_button is not None:
            self.other_button.force_reset()
        self.is_pressed = True
        return True

    def force_reset(self) -> None:
        self.is_pressed = False

    def perform_interaction(self, action: Action, inventory: Optional["Inventory"]) -> bool:
        if action.verb == "PressButton":
            return self.press()
        return super().perform_interaction(action, inventory)


@dataclass(eq=False)
class Lever(Interactable):
    """
    Lever puzzle: it only goes down once ``required_button`` is pressed, and
    while it is down the ``buttons_to_lock`` cannot be pressed.
    """
    required_button: Optional[Button] = None
    buttons_to_lock: List[Button] = field(default_factory=list)
    is_down: bool = field(default=False, init=False)

    def _default_interactions(self) -> List[Action]:
        return [
            Action("press the red button", "PressRedButton"),
            Action("pull the lever down", "PullLeverDown"),
            Action("push the lever up", "PushLeverUp"),
        ]

    def pull_down(self) -> bool:
        if self.is_down:
            return False
        if self.required_button is not None and not self.required_button.is_pressed:
            logger.info("%s is locked, press %s first", self.name, self.required_button.name)
            return False
        self.is_down = True
        for button in self.buttons_to_lock:
            button.locked = True
        return True

    def push_up(self) -> bool:
        if not self.is_down:
            return False
        self.is_down = False
        for button in self.buttons_to_lock:
            button.locked = False
        return True

    def perform_interaction(self, action: Action, inventory: Optional["Inventory"]) -> bool:
        if action.verb == "PressRedButton":
            if self.required_button is None or self.required_button.locked:
                return False
            self.required_button.is_pressed = True
            return True
        if action.verb == "PullLeverDown":
            return self.pull_down()
        if action.verb == "PushLeverUp":
            return self.push_up()
        return super().perform_interaction(action, inventory)


@dataclass(eq=False)
class Chair(Interactable):
    occupied: bool = field(default=False, init=False)

    def _default_interactions(self) -> List[Action]:
        return [Action("sit down", "Sit", self.name)]

    def perform_interaction(self, action: Action, inventory: Optional["Inventory"]) -> bool:
        if action.verb == "Sit":
            self.occupied = True
            return True
        return super().perform_interaction(action, inventory)

    def end_interaction(self) -> None:
        self.occupied = False
        super().end_interaction()


@dataclass(eq=False)
class Crate(Interactable):
    """Fires ``on_interact`` when used; only the first time if one-shot."""
    on_interact: List[Callable[[], None]] = field(default_factory=list)
    one_shot: bool = False
    triggered: bool = field(default=False, init=False)

    def start_interaction(
        self,
        last_action: Optional[Action],
        inventory: Optional["Inventory"] = None,
    ) -> List[Action]:
        if not (self.one_shot and self.triggered):
            self.triggered = True
            for callback in self.on_interact:
                callback()
        return super().start_interaction(last_action, inventory)


@dataclass(eq=False)
class LightSwitch(Interactable):
    light_on: bool = True

    def start_interaction(
        self,
        last_action: Optional[Action],
        inventory: Optional["Inventory"] = None,
    ) -> List[Action]:
        self.light_on = not self.light_on
        return super().start_interaction(last_action, inventory)
