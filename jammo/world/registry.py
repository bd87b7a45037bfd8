"""
WorldRegistry: the discoverable set of world objects.

Objects register on creation and deregister on destruction. The registry is
injected into the action space builder and the controller, which look objects
up by name, by kind and by distance. Iteration follows registration order, so
"closest" ties go to the object registered first.

Lookups are scoped to the current room unless stated otherwise.
"""
from itertools import count
import logging
from typing import Dict, Iterator, List, Optional, Type, TypeVar, Union

from jammo.actions.action import Action
from .entities import PickUp, Room, RoomSwitcher, Vec3, WorldObject
from .interactables import HidingSpot, Interactable

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=WorldObject)


class WorldRegistry:
    """
    Handle-based store of world objects and rooms.

    Usage:
        registry = WorldRegistry()
        registry.add_room(Room("lab"))
        handle = registry.add(Button("button", room="lab"))
        registry.find_interactable("button")  # -> Button
    """

    def __init__(self, current_room: Optional[str] = None):
        self._objects: Dict[int, WorldObject] = {}
        self._rooms: Dict[str, Room] = {}
        self._handles = count(1)
        self._current_room = current_room

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def add(self, obj: WorldObject, room: Optional[str] = None) -> int:
        """Register an object and return its stable handle."""
        if obj.handle is not None and self._objects.get(obj.handle) is obj:
            return obj.handle
        if room is not None:
            obj.room = room
        obj.handle = next(self._handles)
        self._objects[obj.handle] = obj
        return obj.handle

    def remove(self, target: Union[int, WorldObject]) -> Optional[WorldObject]:
        """Deregister an object (destroyed or disabled). Unknown handles are ignored."""
        handle = target.handle if isinstance(target, WorldObject) else target
        if handle is None:
            return None
        return self._objects.pop(handle, None)

    def get(self, handle: Optional[int]) -> Optional[WorldObject]:
        if handle is None:
            return None
        return self._objects.get(handle)

    def __contains__(self, handle: int) -> bool:
        return handle in self._objects

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[WorldObject]:
        return iter(list(self._objects.values()))

    def clear(self) -> None:
        """Forget every object and room. Handles are never reused."""
        self._objects.clear()
        self._rooms.clear()
        self._current_room = None

    # =========================================================================
    # Rooms
    # =========================================================================

    def add_room(self, room: Room) -> Room:
        self._rooms[room.name] = room
        if self._current_room is None:
            self._current_room = room.name
        return room

    def get_room(self, name: str) -> Optional[Room]:
        return self._rooms.get(name)

    @property
    def current_room(self) -> Optional[str]:
        return self._current_room

    def set_current_room(self, name: str) -> bool:
        """
        Switch rooms, running the old room's exit and the new room's enter
        callbacks. Returns False for an unknown room.
        """
        room = self._rooms.get(name)
        if room is None:
            logger.warning("unknown room %r", name)
            return False

        previous = self._rooms.get(self._current_room) if self._current_room else None
        if previous is not None:
            previous.exit()
        self._current_room = name
        room.enter()
        logger.info("current room: %s", name)
        return True

    def is_current_room(self, name: str) -> bool:
        return self._current_room == name

    # =========================================================================
    # Kind queries
    # =========================================================================

    def _of_type(self, kind: Type[T], current_room_only: bool = True) -> List[T]:
        result = []
        for obj in self._objects.values():
            if not isinstance(obj, kind):
                continue
            if current_room_only and not self._in_current_room(obj):
                continue
            result.append(obj)
        return result

    def _in_current_room(self, obj: WorldObject) -> bool:
        if isinstance(obj, PickUp) and obj.held:
            return False
        return obj.room == self._current_room

    def objects_in_room(self) -> List[WorldObject]:
        return self._of_type(WorldObject)

    def interactables_in_room(self) -> List[Interactable]:
        return self._of_type(Interactable)

    def pickups_in_room(self) -> List[PickUp]:
        return self._of_type(PickUp)

    def room_switchers_in_room(self) -> List[RoomSwitcher]:
        return self._of_type(RoomSwitcher)

    def hiding_spots(self, current_room_only: bool = False) -> List[HidingSpot]:
        return self._of_type(HidingSpot, current_room_only=current_room_only)

    # =========================================================================
    # Name lookups
    # =========================================================================

    def _find(self, kind: Type[T], name: str) -> Optional[T]:
        if not name:
            return None
        for obj in self._of_type(kind):
            if obj.matches(name):
                return obj
        return None

    def find_interactable(self, name: str) -> Optional[Interactable]:
        return self._find(Interactable, name)

    def find_pickup(self, name: str) -> Optional[PickUp]:
        return self._find(PickUp, name)

    def find_room_switcher(self, name: str) -> Optional[RoomSwitcher]:
        return self._find(RoomSwitcher, name)

    def find_object(self, name: str) -> Optional[WorldObject]:
        """Any object in the current room, whatever its kind."""
        return self._find(WorldObject, name)

    def find_hiding_spot(self, name: str) -> Optional[HidingSpot]:
        if not name:
            return None
        for spot in self.hiding_spots():
            if spot.matches(name):
                return spot
        return None

    # =========================================================================
    # Distance queries
    # =========================================================================

    @staticmethod
    def _closest(candidates: List[T], position: Vec3) -> Optional[T]:
        closest = None
        closest_distance = float("inf")
        for obj in candidates:
            distance = position.planar_distance_to(obj.position)
            if distance < closest_distance:
                closest = obj
                closest_distance = distance
        return closest

    def closest_pickup(self, position: Vec3) -> Optional[PickUp]:
        """Nearest pickup in the current room (planar distance)."""
        return self._closest(self.pickups_in_room(), position)

    def closest_hiding_spot(self, position: Vec3) -> Optional[HidingSpot]:
        """Nearest registered hiding spot (planar distance)."""
        return self._closest(self.hiding_spots(), position)

    # =========================================================================
    # Room actions
    # =========================================================================

    def current_room_actions(self) -> List[Action]:
        """
        Every action offered by the current room, in a fixed order:
        interactables, then pickups, then room switchers.
        """
        actions: List[Action] = []
        for interactable in self.interactables_in_room():
            actions.extend(interactable.get_possible_actions())
        for pickup in self.pickups_in_room():
            actions.extend(pickup.get_possible_actions())
        for switcher in self.room_switchers_in_room():
            actions.extend(switcher.get_possible_actions())
        return actions

    def get_state(self) -> dict:
        return {
            "current_room": self._current_room,
            "rooms": list(self._rooms),
            "objects": [obj.to_dict() for obj in self._objects.values()],
        }
