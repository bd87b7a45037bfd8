"""
Presenter: the visible side of the robot (animation cues, body visibility).

The controller only emits cues; playing animations is the engine's job.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
import logging
from typing import List

logger = logging.getLogger(__name__)


class Cue(Enum):
    HELLO = "hello"
    DANCE = "dance"
    PUZZLED = "puzzled"
    SIT = "sit"
    DYING = "dying"


class Presenter(ABC):

    @abstractmethod
    def trigger(self, cue: Cue) -> None:
        pass

    @abstractmethod
    def face_viewer(self) -> None:
        """Turn the robot toward the camera."""
        pass

    @abstractmethod
    def set_body_visible(self, visible: bool) -> None:
        pass

    @abstractmethod
    def reset_rig(self) -> None:
        """Snap the visible rig back onto the agent's origin."""
        pass

    @abstractmethod
    def set_walk_speed(self, speed: float) -> None:
        pass


@dataclass
class PresenterCall:
    name: str
    value: object = None


class RecordingPresenter(Presenter):
    """Logs every cue and keeps a history (used by the runtime and tests)."""

    def __init__(self):
        self.calls: List[PresenterCall] = []
        self.body_visible = True
        self.walk_speed = 0.0

    def trigger(self, cue: Cue) -> None:
        logger.info("animation cue: %s", cue.value)
        self.calls.append(PresenterCall("trigger", cue))

    def face_viewer(self) -> None:
        self.calls.append(PresenterCall("face_viewer"))

    def set_body_visible(self, visible: bool) -> None:
        self.body_visible = visible
        self.calls.append(PresenterCall("set_body_visible", visible))

    def reset_rig(self) -> None:
        self.calls.append(PresenterCall("reset_rig"))

    def set_walk_speed(self, speed: float) -> None:
        # Called every tick; not recorded.
        self.walk_speed = speed

    @property
    def cues(self) -> List[Cue]:
        return [call.value for call in self.calls if call.name == "trigger"]

    def clear(self) -> None:
        self.calls.clear()
