"""
Agent states, intent kinds and the verb parser.

Verbs arrive as free strings from the action catalog ("MoveTo", "hide",
"back", "PressButton", ...). ``parse_verb`` maps them onto a closed set of
intent kinds; anything it does not know is UNKNOWN, which is how
interaction-specific verbs like "PressButton" come out.
"""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, FrozenSet, Optional

from jammo.actions.action import DISENGAGE_VERBS, HIDE_VERB, RESTART_VERB


class AgentState(Enum):
    IDLE = auto()
    SIT = auto()
    HELLO = auto()                   # say hello to the audience
    DANCE = auto()
    PUZZLED = auto()                 # command not understood / not possible
    GO_HIDE = auto()                 # move to a hiding spot, then hide
    HIDING = auto()
    MOVE_TO = auto()
    USE_INTERACT = auto()            # move to an interactable, then engage it
    PICK_UP = auto()                 # move to a pickup, then take it
    BRING_OBJECT = auto()            # step 1: move to the object and grab it
    BRING_OBJECT_TO_PLAYER = auto()  # step 2: carry it to the player and drop it


class IntentKind(Enum):
    IDLE = auto()
    SIT = auto()
    HELLO = auto()
    DANCE = auto()
    PUZZLED = auto()
    GO_HIDE = auto()
    HIDING = auto()
    MOVE_TO = auto()
    USE_INTERACT = auto()
    PICK_UP = auto()
    BRING_OBJECT = auto()
    BRING_OBJECT_TO_PLAYER = auto()
    HIDE = auto()          # "hide" with no noun: nearest hiding spot
    DISENGAGE = auto()     # back / stop / exit / let's go
    RESTART = auto()
    UNKNOWN = auto()       # interaction-specific verb, state unchanged


_VERB_TABLE: Dict[str, IntentKind] = {
    "idle": IntentKind.IDLE,
    "sit": IntentKind.SIT,
    "hello": IntentKind.HELLO,
    "dance": IntentKind.DANCE,
    "puzzled": IntentKind.PUZZLED,
    "gohide": IntentKind.GO_HIDE,
    "hiding": IntentKind.HIDING,
    "moveto": IntentKind.MOVE_TO,
    "useinteract": IntentKind.USE_INTERACT,
    "pickup": IntentKind.PICK_UP,
    "bringobject": IntentKind.BRING_OBJECT,
    "bringobjecttoplayer": IntentKind.BRING_OBJECT_TO_PLAYER,
    HIDE_VERB: IntentKind.HIDE,
    RESTART_VERB: IntentKind.RESTART,
}
_VERB_TABLE.update({verb: IntentKind.DISENGAGE for verb in DISENGAGE_VERBS})


# Kinds that select a state. HIDING and HIDE both mean "travel, then hide".
KIND_TO_STATE: Dict[IntentKind, AgentState] = {
    IntentKind.IDLE: AgentState.IDLE,
    IntentKind.SIT: AgentState.SIT,
    IntentKind.HELLO: AgentState.HELLO,
    IntentKind.DANCE: AgentState.DANCE,
    IntentKind.PUZZLED: AgentState.PUZZLED,
    IntentKind.GO_HIDE: AgentState.GO_HIDE,
    IntentKind.HIDING: AgentState.GO_HIDE,
    IntentKind.HIDE: AgentState.GO_HIDE,
    IntentKind.MOVE_TO: AgentState.MOVE_TO,
    IntentKind.USE_INTERACT: AgentState.USE_INTERACT,
    IntentKind.PICK_UP: AgentState.PICK_UP,
    IntentKind.BRING_OBJECT: AgentState.BRING_OBJECT,
    IntentKind.BRING_OBJECT_TO_PLAYER: AgentState.BRING_OBJECT_TO_PLAYER,
}

# States that cannot run without a goal target.
TARGETED_STATES: FrozenSet[AgentState] = frozenset({
    AgentState.GO_HIDE,
    AgentState.MOVE_TO,
    AgentState.USE_INTERACT,
    AgentState.PICK_UP,
    AgentState.BRING_OBJECT,
    AgentState.BRING_OBJECT_TO_PLAYER,
})

# States in which the walk animation plays.
WALKING_STATES: FrozenSet[AgentState] = frozenset({
    AgentState.MOVE_TO,
    AgentState.GO_HIDE,
    AgentState.USE_INTERACT,
    AgentState.PICK_UP,
    AgentState.BRING_OBJECT,
    AgentState.BRING_OBJECT_TO_PLAYER,
})


def parse_verb(verb: str) -> IntentKind:
    """
    Case-insensitive; underscores and surrounding spaces are ignored for the
    state names ("MoveTo", "move_to", "moveto" are the same verb).
    """
    key = verb.strip().lower()
    kind = _VERB_TABLE.get(key)
    if kind is None:
        kind = _VERB_TABLE.get(key.replace("_", ""))
    return kind or IntentKind.UNKNOWN


def state_for(kind: IntentKind) -> Optional[AgentState]:
    return KIND_TO_STATE.get(kind)


@dataclass(frozen=True)
class Transition:
    """Result of a per-tick handler: move to ``state`` with goal ``target``."""
    state: AgentState
    target: Optional[int] = None
