"""
Action catalog: the command candidates the robot can be asked to perform.

An Action pairs a natural-language sentence (what gets embedded and compared
against the user's utterance) with an intent tag ("verb") and an optional
target name ("noun"). An ActionSpace is the ordered list of actions valid
right now. The ranker scores ``space.sentences()``, which is a projection of
the very same list, so a ranked index always points at the action it scored.
"""
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence, Tuple, overload


# Verbs that end the current interaction instead of being forwarded to it.
DISENGAGE_VERBS: Tuple[str, ...] = ("back", "stop", "exit", "let's go")

RESTART_VERB = "restart"
HIDE_VERB = "hide"


@dataclass(frozen=True)
class Action:
    """A single candidate command: sentence, intent tag, optional target."""
    sentence: str
    verb: str
    noun: str = ""

    @property
    def has_target(self) -> bool:
        return self.noun != ""

    @property
    def normalized_noun(self) -> str:
        """Noun as used for name lookups (lowercase, dots removed)."""
        return normalize_name(self.noun)

    def is_disengage(self) -> bool:
        return self.verb in DISENGAGE_VERBS

    def to_dict(self) -> dict:
        return {"sentence": self.sentence, "verb": self.verb, "noun": self.noun}


def normalize_name(name: str) -> str:
    """Object names are compared lowercase with dots stripped ("Key.001" style)."""
    return name.lower().replace(".", "")


class ActionSpace(Sequence[Action]):
    """
    Immutable, ordered collection of Actions.

    Rebuilt before every ranking call. Concatenation keeps order, so the
    space built from fragments [a, b] + [c] ranks a=0, b=1, c=2.
    """

    def __init__(self, actions: Iterable[Action] = ()):
        self._actions: Tuple[Action, ...] = tuple(actions)

    @classmethod
    def concat(cls, *fragments: Iterable[Action]) -> "ActionSpace":
        merged: List[Action] = []
        for fragment in fragments:
            merged.extend(fragment)
        return cls(merged)

    @overload
    def __getitem__(self, index: int) -> Action: ...

    @overload
    def __getitem__(self, index: slice) -> "ActionSpace": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return ActionSpace(self._actions[index])
        return self._actions[index]

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self) -> Iterator[Action]:
        return iter(self._actions)

    def __add__(self, other: Iterable[Action]) -> "ActionSpace":
        return ActionSpace.concat(self, other)

    def __eq__(self, other) -> bool:
        if isinstance(other, ActionSpace):
            return self._actions == other._actions
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._actions)

    def __repr__(self) -> str:
        return f"ActionSpace({len(self._actions)} actions)"

    def sentences(self) -> List[str]:
        """Sentences to embed, index-aligned with this space."""
        return [action.sentence for action in self._actions]

    def contains_index(self, index: int) -> bool:
        return 0 <= index < len(self._actions)

    def verbs(self) -> List[str]:
        return [action.verb for action in self._actions]


def disengage_actions() -> List[Action]:
    """Exit commands appended to every interactable that offers actions."""
    return [
        Action("stop", "back"),
        Action("exit", "back"),
        Action("back", "back"),
        Action("let us go", "back"),
    ]


def restart_space() -> ActionSpace:
    """The only action space offered once the game is over."""
    return ActionSpace([Action(RESTART_VERB, RESTART_VERB, RESTART_VERB)])


# Always-available commands, independent of the room the robot is in.
DEFAULT_BONUS_ACTIONS: Tuple[Action, ...] = (
    Action("say hello", "Hello"),
    Action("wave at the audience", "Hello"),
    Action("dance", "Dance"),
    Action("be happy and dance", "Dance"),
    Action("hide", HIDE_VERB),
    Action("hide somewhere", HIDE_VERB),
    Action("come here", "MoveTo", "audiencepos"),
    Action("come to the audience", "MoveTo", "audiencepos"),
    Action("sit down", "Sit"),
)
