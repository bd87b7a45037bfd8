"""
World geometry and the base object types: positions, objects, pickups,
room switchers and rooms.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from jammo.actions.action import Action, normalize_name


@dataclass
class Vec3:
    """World position. ``y`` is the vertical axis."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def distance_to(self, other: "Vec3") -> float:
        return ((self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2) ** 0.5

    def planar_distance_to(self, other: "Vec3") -> float:
        """Distance on the ground plane, ignoring height."""
        return ((self.x - other.x) ** 2 + (self.z - other.z) ** 2) ** 0.5

    def vertical_offset_to(self, other: "Vec3") -> float:
        return abs(self.y - other.y)

    def at_height(self, y: float) -> "Vec3":
        """Same ground point at another height (used to aim the mover)."""
        return Vec3(self.x, y, self.z)

    def copy(self) -> "Vec3":
        return Vec3(self.x, self.y, self.z)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass(eq=False)
class WorldObject:
    """
    Anything the robot can be sent to: props, markers, pickups, interactables.

    ``handle`` is assigned by the WorldRegistry on registration and stays
    stable for the object's lifetime; the controller stores handles, never
    object references, for its goal target and current interaction.
    """
    name: str
    position: Vec3 = field(default_factory=Vec3)
    synonyms: List[str] = field(default_factory=list)
    room: Optional[str] = None

    handle: Optional[int] = field(default=None, init=False)
    kinematic: bool = field(default=False, init=False)
    carried_by: Optional[str] = field(default=None, init=False)

    @property
    def lookup_name(self) -> str:
        return normalize_name(self.name)

    def all_names(self) -> List[str]:
        return [self.name] + list(self.synonyms)

    def matches(self, name: str) -> bool:
        return self.lookup_name == normalize_name(name)

    def attach(self, holder: str, position: Vec3) -> None:
        """Carry the object kinematically (physics off, follows the holder)."""
        self.kinematic = True
        self.carried_by = holder
        self.position = position.copy()

    def detach(self) -> None:
        """Release the object back to physics."""
        self.kinematic = False
        self.carried_by = None

    @property
    def is_carried(self) -> bool:
        return self.carried_by is not None

    def to_dict(self) -> dict:
        return {
            "handle": self.handle,
            "name": self.name,
            "type": type(self).__name__.lower(),
            "position": self.position.to_dict(),
            "room": self.room,
        }


@dataclass(eq=False)
class PickUp(WorldObject):
    """An item the robot can walk to and put in its inventory."""
    held: bool = field(default=False, init=False)

    def get_possible_actions(self) -> List[Action]:
        actions = []
        for name in self.all_names():
            actions.append(Action("Move to the " + name, "MoveTo", self.name))
            actions.append(Action("Go to the " + name, "MoveTo", self.name))
            actions.append(Action("Pick up the " + name, "PickUp", self.name))
        return actions

    def picked_up(self) -> None:
        self.held = True


@dataclass(eq=False)
class RoomSwitcher(WorldObject):
    """Doorway trigger. Reaching it makes ``target_room`` the current room."""
    target_room: str = ""

    def get_possible_actions(self) -> List[Action]:
        actions = []
        for name in self.all_names():
            actions.append(Action("Move to the " + name, "MoveTo", self.name))
            actions.append(Action("Go to the " + name, "MoveTo", self.name))
        return actions


@dataclass
class Room:
    """A room; only objects in the current room contribute actions."""
    name: str
    on_enter: List = field(default_factory=list)
    on_exit: List = field(default_factory=list)

    def enter(self) -> None:
        for callback in self.on_enter:
            callback()

    def exit(self) -> None:
        for callback in self.on_exit:
            callback()
