"""
World model consumed by the controller: objects with stable handles, the
registry that finds them, the robot's inventory, and the mover/presenter
interfaces to the engine.
"""
from .entities import Vec3, WorldObject, PickUp, RoomSwitcher, Room
from .interactables import (
    ActionEventPair,
    Interactable,
    HidingSpot,
    Button,
    Lever,
    Chair,
    Crate,
    LightSwitch,
)
from .inventory import Inventory
from .registry import WorldRegistry
from .mover import Mover, KinematicMover
from .presenter import Presenter, RecordingPresenter, Cue
from .scene import build_demo_world, AUDIENCE_MARKER

__all__ = [
    "Vec3",
    "WorldObject",
    "PickUp",
    "RoomSwitcher",
    "Room",
    "ActionEventPair",
    "Interactable",
    "HidingSpot",
    "Button",
    "Lever",
    "Chair",
    "Crate",
    "LightSwitch",
    "Inventory",
    "WorldRegistry",
    "Mover",
    "KinematicMover",
    "Presenter",
    "RecordingPresenter",
    "Cue",
    "build_demo_world",
    "AUDIENCE_MARKER",
]
