"""
Tests for the AgentController state machine.

Utterances go through the real ranker with the bag-of-words encoder from
conftest, so "use the blue button" matches the catalog sentence
"Use the blue button" exactly.
"""
import pytest

from jammo.actions import Action, ActionSpace, restart_space
from jammo.controller import (
    AgentController,
    AgentState,
    ControllerConfig,
    IntentKind,
    parse_verb,
    state_for,
)
from jammo.world import Cue, Vec3, WorldObject


def engage_blue_button(controller, mover, settle):
    controller.on_utterance("use the blue button")
    assert controller.state == AgentState.USE_INTERACT
    assert settle(controller, mover) == AgentState.IDLE
    return controller.registry.find_interactable("blue button")


# =============================================================================
# Verb parsing
# =============================================================================

@pytest.mark.parametrize("verb,kind", [
    ("MoveTo", IntentKind.MOVE_TO),
    ("moveto", IntentKind.MOVE_TO),
    ("move_to", IntentKind.MOVE_TO),
    ("UseInteract", IntentKind.USE_INTERACT),
    ("PickUp", IntentKind.PICK_UP),
    ("BringObject", IntentKind.BRING_OBJECT),
    ("Hiding", IntentKind.HIDING),
    ("hide", IntentKind.HIDE),
    ("back", IntentKind.DISENGAGE),
    ("let's go", IntentKind.DISENGAGE),
    ("restart", IntentKind.RESTART),
    ("PressButton", IntentKind.UNKNOWN),
    ("", IntentKind.UNKNOWN),
])
def test_parse_verb(verb, kind):
    assert parse_verb(verb) == kind


def test_hiding_verbs_map_to_go_hide():
    assert state_for(IntentKind.HIDING) == AgentState.GO_HIDE
    assert state_for(IntentKind.HIDE) == AgentState.GO_HIDE
    assert state_for(IntentKind.UNKNOWN) is None
    assert state_for(IntentKind.DISENGAGE) is None


# =============================================================================
# Resolution failures
# =============================================================================

def test_low_confidence_is_puzzled(scripted_controller, presenter):
    agent = scripted_controller.agent
    agent.state = AgentState.MOVE_TO
    agent.goal_target = scripted_controller.registry.find_object("cube").handle

    assert scripted_controller.resolve(0.1, 0) == AgentState.PUZZLED
    assert agent.goal_target is None

    assert scripted_controller.update() == AgentState.IDLE
    assert presenter.cues == [Cue.PUZZLED]


def test_unknown_utterance_is_puzzled(controller, presenter):
    result = controller.on_utterance("xyzzy nonsense")

    assert not result.accepted
    assert result.state == AgentState.PUZZLED
    assert controller.update() == AgentState.IDLE
    assert presenter.cues == [Cue.PUZZLED]


def test_index_outside_action_space_is_puzzled(controller):
    assert controller.resolve(0.9, len(controller.action_space)) == AgentState.PUZZLED
    assert controller.resolve(0.9, -1) == AgentState.PUZZLED


def test_pick_up_on_non_pickup_is_puzzled(scripted_controller):
    space = ActionSpace([Action("pick up the cube", "PickUp", "cube")])

    assert scripted_controller.resolve(0.9, 0, space) == AgentState.PUZZLED
    assert len(scripted_controller.agent.inventory) == 0
    assert scripted_controller.agent.goal_target is None


def test_use_on_missing_interactable_is_puzzled(controller):
    space = ActionSpace([Action("use the terminal", "UseInteract", "terminal")])
    assert controller.resolve(0.9, 0, space) == AgentState.PUZZLED


def test_dangling_goal_target_is_puzzled(scripted_controller):
    registry = scripted_controller.registry
    cube = registry.find_object("cube")
    scripted_controller.agent.state = AgentState.MOVE_TO
    scripted_controller.agent.goal_target = cube.handle

    registry.remove(cube)
    assert scripted_controller.update() == AgentState.PUZZLED


# =============================================================================
# Presentational states
# =============================================================================

def test_hello_returns_to_idle_once(controller, presenter):
    assert controller.on_utterance("say hello").state == AgentState.HELLO

    assert controller.update() == AgentState.IDLE
    assert presenter.cues == [Cue.HELLO]
    assert "face_viewer" in [call.name for call in presenter.calls]

    assert controller.update() == AgentState.IDLE
    assert presenter.cues == [Cue.HELLO], "IDLE must not replay the cue"


def test_repeated_hello_resolves_the_same_way(controller, presenter):
    space = ActionSpace([Action("say hello", "Hello")])

    for _ in range(2):
        assert controller.resolve(0.9, 0, space) == AgentState.HELLO
        assert controller.update() == AgentState.IDLE

    assert presenter.cues == [Cue.HELLO, Cue.HELLO]


def test_dance_and_sit(controller, presenter):
    controller.on_utterance("dance")
    controller.update()
    controller.on_utterance("sit down")
    controller.update()
    assert presenter.cues == [Cue.DANCE, Cue.SIT]


# =============================================================================
# Movement and arrival
# =============================================================================

@pytest.mark.parametrize("name,expected", [
    ("cube", AgentState.IDLE),
    ("audiencepos", AgentState.HELLO),
    ("locker", AgentState.HIDING),
])
def test_move_to_arrival(scripted_controller, scripted_mover, name, expected):
    target = scripted_controller.registry.find_object(name)
    scripted_controller.agent.state = AgentState.MOVE_TO
    scripted_controller.agent.goal_target = target.handle

    scripted_mover.current = Vec3(target.position.x + 0.05, 0.0, target.position.z)
    scripted_mover.velocity = 0.1

    assert scripted_controller.update() == expected
    assert scripted_controller.agent.goal_target is None
    if expected == AgentState.HIDING:
        assert scripted_controller.agent.current_interaction == target.handle


def test_move_to_keeps_going_while_fast_or_far(scripted_controller, scripted_mover):
    registry = scripted_controller.registry
    cube = registry.find_object("cube")
    scripted_controller.agent.state = AgentState.MOVE_TO
    scripted_controller.agent.goal_target = cube.handle

    scripted_mover.current = cube.position.copy()
    scripted_mover.velocity = 1.0
    assert scripted_controller.update() == AgentState.MOVE_TO

    scripted_mover.current = Vec3(0.0, 0.0, 0.0)
    scripted_mover.velocity = 0.0
    assert scripted_controller.update() == AgentState.MOVE_TO
    assert scripted_mover.destinations[-1] == Vec3(cube.position.x, 0.0, cube.position.z)


def test_vertical_offset_blocks_arrival(scripted_controller, scripted_mover):
    registry = scripted_controller.registry
    shelf = WorldObject("shelf", Vec3(0.0, 5.0, 0.0))
    registry.add(shelf, room="lab")
    scripted_controller.agent.state = AgentState.MOVE_TO
    scripted_controller.agent.goal_target = shelf.handle

    assert scripted_controller.update() == AgentState.MOVE_TO


def test_walk_speed_follows_state(controller, presenter):
    controller.on_utterance("go to the door")
    controller.update()
    assert presenter.walk_speed == 1.0

    controller.on_utterance("say hello")
    controller.update()
    assert presenter.walk_speed == 0.0


def test_new_command_overrides_the_current_one(controller):
    controller.on_utterance("go to the door")
    controller.update()
    controller.on_utterance("pick up the key")

    assert controller.state == AgentState.PICK_UP
    assert controller.goal_target.name == "key"


def test_room_switcher_changes_room(controller, mover, registry, settle):
    controller.on_utterance("go to the door")
    assert settle(controller, mover) == AgentState.IDLE

    assert registry.current_room == "hallway"
    assert "Use the terminal" in controller.build_action_space().sentences()
    assert "Use the blue button" not in controller.action_space.sentences()


# =============================================================================
# Interactions
# =============================================================================

def test_press_the_button_is_forwarded_to_the_interaction(controller, mover, settle):
    button = engage_blue_button(controller, mover, settle)

    assert controller.agent.current_interaction == button.handle
    assert controller.action_space[0].sentence == "press the button"

    result = controller.on_utterance("please press the button")
    assert result.index == 0
    assert result.action.sentence == "press the button"
    assert button.is_pressed
    assert controller.state == AgentState.IDLE


def test_disengage_ends_the_interaction(controller, mover, settle):
    button = engage_blue_button(controller, mover, settle)

    controller.on_utterance("back")

    assert controller.agent.current_interaction is None
    assert not button.engaged
    assert controller.action_space == controller.builder.room_space()


def test_engaging_another_object_ends_the_first(controller, mover, settle):
    button = engage_blue_button(controller, mover, settle)

    controller.on_utterance("use the lever")
    assert settle(controller, mover) == AgentState.IDLE

    lever = controller.registry.find_interactable("lever")
    assert controller.agent.current_interaction == lever.handle
    assert lever.engaged and not button.engaged


def test_one_shot_interactable_is_not_kept(controller, mover, registry, settle):
    controller.on_utterance("use the crate")
    assert settle(controller, mover) == AgentState.IDLE

    assert registry.find_interactable("crate").triggered
    assert controller.agent.current_interaction is None


def test_pick_up_key(controller, mover, registry, settle):
    controller.on_utterance("pick up the key")
    assert controller.state == AgentState.PICK_UP
    assert settle(controller, mover) == AgentState.IDLE

    assert "key" in controller.agent.inventory
    assert "Pick up the key" not in controller.build_action_space().sentences()


def test_pick_up_without_noun_targets_nearest_pickup(scripted_controller):
    space = ActionSpace([Action("pick something up", "PickUp")])
    assert scripted_controller.resolve(0.9, 0, space) == AgentState.PICK_UP
    assert scripted_controller.goal_target.name == "key"


def test_keycard_unlocks_terminal(controller, mover, registry, settle):
    controller.on_utterance("go to the door")
    settle(controller, mover)
    controller.on_utterance("pick up the keycard")
    settle(controller, mover)
    keycard = controller.agent.inventory.items[0]

    controller.on_utterance("use the terminal")
    assert settle(controller, mover) == AgentState.IDLE
    terminal = registry.find_interactable("terminal")
    assert controller.agent.current_interaction == terminal.handle

    controller.on_utterance("swipe the keycard")
    assert getattr(terminal, "unlocked", False)
    assert "keycard" not in controller.agent.inventory
    assert keycard.handle not in registry


# =============================================================================
# Hiding
# =============================================================================

def test_hide_goes_to_nearest_spot_and_hides(controller, mover, presenter, settle):
    controller.on_utterance("hide")
    assert controller.state == AgentState.GO_HIDE
    assert controller.goal_target.name == "locker"

    assert settle(controller, mover) == AgentState.HIDING
    controller.update()
    assert controller.agent.is_hiding
    assert presenter.body_visible is False


def test_any_command_leaves_the_hiding_spot(controller, mover, presenter, settle):
    controller.on_utterance("hide")
    settle(controller, mover)
    controller.update()
    locker = controller.registry.find_interactable("locker")

    controller.on_utterance("come here")

    assert not controller.agent.is_hiding
    assert presenter.body_visible is True
    assert "reset_rig" in [call.name for call in presenter.calls]
    assert not locker.engaged
    assert controller.agent.current_interaction is None
    assert controller.state == AgentState.MOVE_TO
    assert controller.goal_target.name == "audiencepos"


def test_back_while_hiding_just_comes_out(controller, mover, settle):
    controller.on_utterance("hide")
    settle(controller, mover)
    controller.update()

    controller.on_utterance("back")
    assert controller.state == AgentState.IDLE
    assert not controller.agent.is_hiding


# =============================================================================
# Bring object
# =============================================================================

def test_bring_object_carries_it_to_the_drop_point(controller, mover, registry, settle):
    config = controller.config
    cube = registry.find_object("cube")
    space = ActionSpace([Action("bring me the cube", "BringObject", "cube")])

    assert controller.resolve(0.9, 0, space) == AgentState.BRING_OBJECT

    states = []
    for _ in range(2000):
        mover.step(1 / 30)
        states.append(controller.update())
        if states[-1] == AgentState.IDLE:
            break

    assert AgentState.BRING_OBJECT_TO_PLAYER in states
    assert states[-1] == AgentState.IDLE
    assert not cube.is_carried
    assert controller.agent.carrying is None
    assert cube.position.planar_distance_to(config.drop_point) < config.reached_object_position_distance + 0.5


# =============================================================================
# Game over
# =============================================================================

def test_game_over_accepts_only_restart(registry, mover, ranker, presenter):
    restarts = []
    controller = AgentController(
        registry, mover, ranker=ranker, presenter=presenter,
        on_restart=lambda: restarts.append(True),
    )

    controller.game_over()
    assert controller.agent.is_game_over
    assert Cue.DYING in presenter.cues
    assert controller.build_action_space() == restart_space()

    controller.on_utterance("dance")
    assert controller.agent.is_game_over
    assert restarts == []

    before = controller.state
    assert controller.resolve(0.9, 0, ActionSpace([Action("dance", "Dance")])) == before
    assert controller.agent.is_game_over

    controller.on_utterance("restart")
    assert restarts == [True]
    assert not controller.agent.is_game_over
    assert controller.state == AgentState.IDLE
    assert "say hello" in controller.action_space.sentences()


# =============================================================================
# Reporting
# =============================================================================

def test_resolve_result_and_state_dicts(controller):
    result = controller.on_utterance("go to the door")
    data = result.to_dict()

    assert data["state"] == "move_to"
    assert data["action"]["noun"] == "door"
    assert data["accepted"] is True

    state = controller.get_state()
    assert state["goal_target_name"] == "door"
    assert state["agent"]["state"] == "move_to"
    assert state["current_room"] == "lab"


def test_threshold_is_configurable(registry, mover, ranker):
    controller = AgentController(registry, mover, ranker=ranker,
                                 config=ControllerConfig(acceptance_threshold=0.99))
    assert controller.on_utterance("please press the button").state == AgentState.PUZZLED
