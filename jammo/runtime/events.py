from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, List, Dict, Any
from collections import deque


class EventType(Enum):
    """Types of events that can occur during runtime."""
    # User input events
    UTTERANCE = auto()          # A transcribed voice command
    GAME_OVER = auto()          # The game ended the round
    RESTART = auto()            # Restart requested outside of speech

    # System events
    INTENT_RESOLVED = auto()    # An utterance was ranked and resolved
    STATE_CHANGED = auto()      # The agent changed state during a tick


@dataclass
class Event:
    """
    Represents an event in the runtime system.
    Events can come from user input or state changes of the agent.
    """
    event_type: EventType
    tick: int
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type.name.lower(),
            "tick": self.tick,
            "data": self.data,
        }


class EventQueue:
    """
    Queue for events between ticks.
    Utterances are queued and processed at the start of each tick, in order.
    """

    def __init__(self, max_size: int = 100):
        self._queue: deque = deque(maxlen=max_size)
        self._processed: List[Event] = []

    def push(self, event: Event) -> None:
        self._queue.append(event)

    def push_utterance(self, text: str, tick: int) -> None:
        self.push(Event(
            event_type=EventType.UTTERANCE,
            tick=tick,
            data={"text": text},
        ))

    def push_game_over(self, tick: int, reason: Optional[str] = None) -> None:
        self.push(Event(
            event_type=EventType.GAME_OVER,
            tick=tick,
            data={"reason": reason or ""},
        ))

    def push_restart(self, tick: int) -> None:
        self.push(Event(event_type=EventType.RESTART, tick=tick))

    def pop_all(self) -> List[Event]:
        """Pop all pending events from the queue."""
        events = list(self._queue)
        self._queue.clear()
        return events

    def record_processed(self, event: Event) -> None:
        self._processed.append(event)

    def get_processed_history(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._processed]

    def clear_history(self) -> None:
        self._processed.clear()

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    @property
    def history_count(self) -> int:
        return len(self._processed)
