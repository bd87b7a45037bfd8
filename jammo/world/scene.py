"""
A small two-room scene used by the demo script and the tests.

    lab:      audience marker, blue/red buttons, lever, locker, chair,
              crate, light switch, key, cube, door to the hallway
    hallway:  vent, keycard, terminal (needs the keycard), door to the lab
"""
from typing import List, Optional

from jammo.actions.action import Action
from .entities import PickUp, Room, RoomSwitcher, Vec3, WorldObject
from .interactables import (
    ActionEventPair,
    Button,
    Chair,
    Crate,
    HidingSpot,
    Interactable,
    Lever,
    LightSwitch,
)
from .registry import WorldRegistry

AUDIENCE_MARKER = "audiencepos"


def build_demo_world(registry: Optional[WorldRegistry] = None) -> WorldRegistry:
    if registry is None:
        registry = WorldRegistry()
    registry.add_room(Room("lab"))
    registry.add_room(Room("hallway"))
    registry.set_current_room("lab")

    # --- lab ---
    registry.add(WorldObject(AUDIENCE_MARKER, Vec3(0.0, 0.0, -4.0), synonyms=["audience"]), room="lab")

    blue = Button("blue button", Vec3(3.0, 1.0, 2.0), synonyms=["button"])
    red = Button("red button", Vec3(3.5, 1.0, 2.0))
    blue.other_button = red
    red.other_button = blue
    registry.add(blue, room="lab")
    registry.add(red, room="lab")

    lever = Lever("lever", Vec3(4.5, 1.0, 2.0), required_button=red, buttons_to_lock=[blue, red])
    registry.add(lever, room="lab")

    registry.add(HidingSpot("locker", Vec3(-5.0, 0.0, 3.0), synonyms=["closet"]), room="lab")
    registry.add(Chair("chair", Vec3(-2.0, 0.0, 0.0)), room="lab")
    registry.add(Crate("crate", Vec3(1.0, 0.0, 5.0), synonyms=["box"], one_shot=True), room="lab")
    registry.add(LightSwitch("light switch", Vec3(-4.0, 1.2, -1.0), synonyms=["light"]), room="lab")
    registry.add(PickUp("key", Vec3(2.0, 0.0, -2.0)), room="lab")
    registry.add(WorldObject("cube", Vec3(-1.0, 0.0, 4.0)), room="lab")
    registry.add(RoomSwitcher("door", Vec3(6.0, 0.0, 0.0), synonyms=["hallway"], target_room="hallway"), room="lab")

    # --- hallway ---
    registry.add(HidingSpot("vent", Vec3(12.0, 0.0, 4.0)), room="hallway")
    registry.add(PickUp("keycard", Vec3(10.0, 0.0, -3.0), synonyms=["card"]), room="hallway")

    terminal = Interactable(
        "terminal",
        Vec3(14.0, 1.0, 0.0),
        synonyms=["computer"],
        possible_interactions=_terminal_actions(),
    )
    terminal.action_event_pairs.append(
        ActionEventPair("UnlockTerminal", lambda: setattr(terminal, "unlocked", True),
                        required_item="keycard", consumes_item=True)
    )
    registry.add(terminal, room="hallway")
    registry.add(RoomSwitcher("lab door", Vec3(8.0, 0.0, 0.0), synonyms=["lab"], target_room="lab"), room="hallway")

    return registry


def _terminal_actions() -> List[Action]:
    return [
        Action("unlock the terminal", "UnlockTerminal"),
        Action("swipe the keycard", "UnlockTerminal"),
    ]
